"""Build the configuration snapshot shown by the setup UI."""

from collections.abc import Collection

from crm2campmon.campmon.auth import Authenticator
from crm2campmon.dynamics.entity import QueryExpression
from crm2campmon.dynamics.metadata import MetadataHelper
from crm2campmon.dynamics.schema import (
    ACTIVE_STATE,
    CONTACT_ENTITY,
    CONTACT_RETURNED_TYPE,
    PUBLIC_VIEW_QUERY_TYPE,
    RECOMMENDED_FIELDS,
    SAVED_QUERY_ENTITY,
)
from crm2campmon.models import (
    CampaignMonitorConfiguration,
    ConfigurationData,
    SyncField,
    SyncView,
)
from crm2campmon.operations.base import Operation


def is_field_checked(
    logical_name: str,
    explicit: Collection[str],
    recommended: Collection[str] = RECOMMENDED_FIELDS,
) -> bool:
    """
    Decide whether a contact field starts out selected.

    An explicit selection wins. With no explicit selection (including an
    empty one) the recommended list applies.
    """
    if logical_name in explicit:
        return True
    return not explicit and logical_name in recommended


class LoadMetadataOperation(Operation):
    """Merge stored configuration with live CRM and Campaign Monitor data."""

    name = "load_metadata"

    def execute(self, serialized_data: str) -> str:
        """Never raises: failures are reported in the snapshot's Error field."""
        try:
            output = self.build_configuration_data(serialized_data)
        except Exception as e:
            self.logger.exception("Error in build configuration.")
            output = ConfigurationData(error=f"Unable to retrieve configuration data. {e}")

        return output.to_json()

    def build_configuration_data(self, serialized_data: str) -> ConfigurationData:
        self.logger.info("Building configuration.")
        output = ConfigurationData()

        config = self.context.config_service.load()
        if config is None:
            self.logger.info("No configuration available.")
            return output

        self.logger.info("Configuration loaded.")
        output.configuration_exists = True

        authenticator = Authenticator(self.context.campmon_client, self.context.config_service)
        auth = authenticator.get_authentication(config)

        clients = self.context.campmon_client.get_clients(auth)
        output.clients = clients

        if len(clients) == 1:
            self.logger.info("Not agency account, retrieving lists.")
            output.lists = self.context.campmon_client.get_lists(auth, clients[0].client_id)
        elif config.client_id and config.client_id.strip():
            output.lists = self.context.campmon_client.get_lists(auth, config.client_id)

        output.id = str(config.id) if config.id else None

        output.bulk_sync_in_progress = config.bulk_sync_in_progress
        output.sync_duplicate_emails = config.sync_duplicate_emails
        output.subscriber_email = int(config.subscriber_email)

        output.client_id = config.client_id
        output.client_name = config.client_name

        output.list_id = config.list_id
        output.list_name = config.list_name

        output.views = self.get_contact_views(config)
        output.fields = self.get_contact_fields(config)

        return output

    def get_contact_fields(self, config: CampaignMonitorConfiguration) -> list[SyncField]:
        """Contact attributes offered for sync, sorted by display name."""
        self.logger.info("Getting contact fields.")
        attributes = MetadataHelper(self.context.org_service).get_entity_attributes(CONTACT_ENTITY)
        explicit = set(config.sync_fields)

        fields = [
            SyncField(
                display_name=a.display_name,
                logical_name=a.logical_name,
                is_checked=is_field_checked(a.logical_name, explicit),
                is_recommended=a.logical_name in RECOMMENDED_FIELDS,
            )
            for a in attributes
            if a.display_name is not None and a.is_valid_for_advanced_find
        ]
        return sorted(fields, key=lambda f: f.display_name.casefold())

    def get_contact_views(self, config: CampaignMonitorConfiguration) -> list[SyncView]:
        """Active public system views on contacts, sorted by name."""
        self.logger.info("Getting contact views.")
        query = QueryExpression(
            entity_name=SAVED_QUERY_ENTITY,
            columns=["savedqueryid", "name"],
        )
        query.add_condition("returnedtypecode", CONTACT_RETURNED_TYPE)
        query.add_condition("statecode", ACTIVE_STATE)
        query.add_condition("querytype", PUBLIC_VIEW_QUERY_TYPE)

        views = [
            SyncView(
                view_id=e.id,
                view_name=e.get_attribute_value("name"),
                is_selected=e.id == config.sync_view_id,
            )
            for e in self.context.org_service.retrieve_multiple(query)
        ]
        return sorted(views, key=lambda v: (v.view_name or "").casefold())
