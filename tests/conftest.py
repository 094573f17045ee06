"""Shared test fixtures."""
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from crm2campmon.campmon.client import CampaignMonitorClient
from crm2campmon.config import Settings
from crm2campmon.dynamics.entity import AttributeMetadata, Entity, QueryExpression
from crm2campmon.models import BasicClient, BasicList
from crm2campmon.operations import OperationContext


class InMemoryOrganizationService:
    """OrganizationService backed by dicts. Records every call in ``calls``."""

    def __init__(self):
        self.records: dict[str, dict[uuid.UUID, dict]] = {}
        self.attribute_metadata: dict[str, list[AttributeMetadata]] = {}
        self.calls: list[tuple] = []

    def add(self, logical_name: str, attributes: dict, record_id: uuid.UUID | None = None) -> uuid.UUID:
        record_id = record_id or uuid.uuid4()
        row = dict(attributes)
        row[f"{logical_name}id"] = record_id
        self.records.setdefault(logical_name, {})[record_id] = row
        return record_id

    def retrieve_multiple(self, query: QueryExpression) -> list[Entity]:
        self.calls.append(("retrieve_multiple", query))
        rows = self.records.get(query.entity_name, {})
        result = []
        for record_id, row in rows.items():
            if not all(row.get(c.attribute) == c.value for c in query.conditions):
                continue
            columns = query.columns or list(row)
            attributes = {c: row[c] for c in columns if c in row}
            result.append(Entity(logical_name=query.entity_name, id=record_id, attributes=attributes))
            if query.top_count is not None and len(result) >= query.top_count:
                break
        return result

    def create(self, entity: Entity) -> uuid.UUID:
        self.calls.append(("create", entity))
        return self.add(entity.logical_name, entity.attributes)

    def update(self, entity: Entity) -> None:
        self.calls.append(("update", entity))
        self.records[entity.logical_name][entity.id].update(entity.attributes)

    def retrieve_entity_attributes(self, logical_name: str) -> list[AttributeMetadata]:
        self.calls.append(("retrieve_entity_attributes", logical_name))
        return list(self.attribute_metadata.get(logical_name, []))

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def close(self) -> None:
        pass


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DYNAMICS_URL="https://example.crm.dynamics.com",
        DYNAMICS_TOKEN="crm-token",
        CAMPMON_API_URL="https://api.createsend.com/api/v3.3",
        CAMPMON_TOKEN_URL="https://api.createsend.com/oauth/token",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def org_service() -> InMemoryOrganizationService:
    return InMemoryOrganizationService()


@pytest.fixture
def campmon_client():
    """A mock CampaignMonitorClient for a non-agency account with one client."""
    client = MagicMock(spec=CampaignMonitorClient)
    client.get_clients.return_value = [BasicClient(ClientID="client-1", Name="Acme")]
    client.get_lists.return_value = [
        BasicList(ListID="list-1", Name="Newsletter"),
        BasicList(ListID="list-2", Name="Events"),
    ]
    return client


@pytest.fixture
def context(org_service, campmon_client) -> OperationContext:
    return OperationContext(org_service, campmon_client)


@pytest.fixture
def config_row(org_service) -> uuid.UUID:
    """A connected configuration row with no selections made yet."""
    return org_service.add(
        "campmon_configuration",
        {
            "campmon_name": "Configuration",
            "campmon_accesstoken": "access-123",
            "campmon_refreshtoken": "refresh-123",
            "campmon_expireson": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
        },
    )
