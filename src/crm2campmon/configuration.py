"""Read and write the single Campaign Monitor configuration row."""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from crm2campmon.dynamics.entity import Entity, OrganizationService, QueryExpression
from crm2campmon.dynamics.schema import (
    CONFIGURATION_COLUMNS,
    CONFIGURATION_ENTITY,
    CONFIGURATION_NAME,
)
from crm2campmon.models import CampaignMonitorConfiguration, SubscriberEmail

logger = logging.getLogger(__name__)


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _parse_uuid(value: Any) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    text = str(value).strip()
    return UUID(text) if text else None


def _parse_subscriber_email(value: Any) -> SubscriberEmail:
    if value is None:
        return SubscriberEmail.EMAILADDRESS1
    try:
        return SubscriberEmail(int(value))
    except ValueError:
        logger.warning(f"Unknown subscriber email option {value}, using emailaddress1")
        return SubscriberEmail.EMAILADDRESS1


def _split_fields(value: str | None) -> list[str]:
    if not value or not value.strip():
        return []
    return value.split(",")


class ConfigurationService:
    """Accessor for the ``campmon_configuration`` record.

    Errors raised by the organization service are not handled here.
    """

    def __init__(self, org_service: OrganizationService):
        if org_service is None:
            raise ValueError("org_service is required")
        self.org_service = org_service

    def get_config_id(self) -> UUID | None:
        """Id of the configuration row, or None if none exists."""
        query = QueryExpression(
            entity_name=CONFIGURATION_ENTITY,
            columns=["campmon_configurationid"],
            top_count=1,
        )
        entities = self.org_service.retrieve_multiple(query)
        return entities[0].id if entities else None

    def save_oauth_token(
        self,
        config_id: UUID | None,
        access_token: str | None,
        refresh_token: str | None,
        expires_on: datetime | None,
    ) -> None:
        """Write only the token attributes, creating the row if needed."""
        entity = Entity(
            logical_name=CONFIGURATION_ENTITY,
            attributes={
                "campmon_accesstoken": access_token,
                "campmon_refreshtoken": refresh_token,
                "campmon_expireson": expires_on,
            },
        )

        if config_id is not None:
            entity.id = config_id
            self.org_service.update(entity)
        else:
            entity["campmon_name"] = CONFIGURATION_NAME
            self.org_service.create(entity)

    def clear_oauth_token(self, config_id: UUID | None) -> None:
        self.save_oauth_token(config_id, None, None, None)

    def load(self) -> CampaignMonitorConfiguration | None:
        """
        Load and verify the configuration.

        Returns None when no row exists or when the stored access token is
        blank, both of which mean "not configured".
        """
        query = QueryExpression(
            entity_name=CONFIGURATION_ENTITY,
            columns=list(CONFIGURATION_COLUMNS),
            top_count=1,
        )
        entities = self.org_service.retrieve_multiple(query)

        if not entities:
            return None

        entity = entities[0]
        subscriber_email = entity.get_attribute_value("campmon_subscriberemail")

        config = CampaignMonitorConfiguration(
            id=_parse_uuid(entity.get_attribute_value("campmon_configurationid", entity.id)),
            access_token=entity.get_attribute_value("campmon_accesstoken"),
            refresh_token=entity.get_attribute_value("campmon_refreshtoken"),
            token_valid_to=_parse_datetime(entity.get_attribute_value("campmon_expireson")),
            bulk_sync_data=entity.get_attribute_value("campmon_bulksyncdata"),
            bulk_sync_in_progress=entity.get_attribute_value("campmon_bulksyncinprogress", False),
            client_id=entity.get_attribute_value("campmon_clientid"),
            client_name=entity.get_attribute_value("campmon_clientname"),
            list_id=entity.get_attribute_value("campmon_listid"),
            list_name=entity.get_attribute_value("campmon_listname"),
            set_up_error=entity.get_attribute_value("campmon_setuperror"),
            sync_duplicate_emails=entity.get_attribute_value("campmon_syncduplicateemails", False),
            sync_fields=_split_fields(entity.get_attribute_value("campmon_syncfields")),
            sync_view_id=_parse_uuid(entity.get_attribute_value("campmon_syncviewid")),
            sync_view_name=entity.get_attribute_value("campmon_syncviewname"),
            subscriber_email=_parse_subscriber_email(subscriber_email),
        )

        if not config.access_token or not config.access_token.strip():
            logger.info("Configuration record does not contain AccessToken")
            return None

        return config

    def save(self, config: CampaignMonitorConfiguration) -> None:
        """Write all mutable settings. Tokens are left untouched."""
        logger.info("Saving configuration")

        entity = Entity(
            logical_name=CONFIGURATION_ENTITY,
            attributes={
                "campmon_clientid": config.client_id,
                "campmon_clientname": config.client_name,
                "campmon_listid": config.list_id,
                "campmon_listname": config.list_name,
                "campmon_syncduplicateemails": config.sync_duplicate_emails,
                "campmon_syncfields": ",".join(config.sync_fields),
                "campmon_syncviewid": str(config.sync_view_id) if config.sync_view_id else None,
                "campmon_syncviewname": config.sync_view_name,
                "campmon_subscriberemail": int(config.subscriber_email),
                "campmon_bulksyncinprogress": config.bulk_sync_in_progress,
                "campmon_bulksyncdata": config.bulk_sync_data,
            },
        )

        if config.id is None:
            logger.info("Creating new configuration record.")
            self.org_service.create(entity)
        else:
            logger.info("Updating existing configuration record.")
            entity.id = config.id
            self.org_service.update(entity)
