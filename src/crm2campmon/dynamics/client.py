"""Dynamics Web API client implementing the organization service."""

import logging
import re
from datetime import datetime
from typing import Any
from uuid import UUID

import httpx

from crm2campmon.config import Settings
from crm2campmon.dynamics.entity import AttributeMetadata, Entity, QueryExpression
from crm2campmon.exceptions import DynamicsAPIError

logger = logging.getLogger(__name__)

ENTITY_ID_PATTERN = re.compile(r"\(([0-9a-fA-F-]{36})\)$")


def entity_set_name(logical_name: str) -> str:
    """Web API collection name for an entity logical name."""
    if logical_name.endswith("y"):
        return logical_name[:-1] + "ies"
    return logical_name + "s"


def format_value(value: Any) -> str:
    """Format a condition value as an OData literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, UUID)):
        return str(value)
    escaped = str(value).replace("'", "''")
    return f"'{escaped}'"


def _serialize(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class WebApiOrganizationService:
    """Synchronous client for the Dynamics OData Web API."""

    def __init__(self, settings: Settings, client: httpx.Client | None = None):
        self.settings = settings
        self.base_url = (
            f"{settings.dynamics_url.rstrip('/')}/api/data/v{settings.dynamics_api_version}"
        )
        self._client = client

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(timeout=self.settings.http_timeout)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> httpx.Response:
        """Make authenticated API request."""
        client = self._get_client()

        try:
            response = client.request(
                method,
                f"{self.base_url}{endpoint}",
                params=params,
                json=json,
                headers={
                    "Authorization": f"Bearer {self.settings.dynamics_token}",
                    "Accept": "application/json",
                    "OData-MaxVersion": "4.0",
                    "OData-Version": "4.0",
                },
            )
        except httpx.HTTPError as e:
            raise DynamicsAPIError(None, str(e)) from e

        if response.status_code >= 400:
            raise DynamicsAPIError(response.status_code, response.text)

        return response

    def retrieve_multiple(self, query: QueryExpression) -> list[Entity]:
        params: dict[str, Any] = {}
        if query.columns:
            params["$select"] = ",".join(query.columns)
        if query.conditions:
            params["$filter"] = " and ".join(
                f"{c.attribute} eq {format_value(c.value)}" for c in query.conditions
            )
        if query.top_count is not None:
            params["$top"] = query.top_count

        response = self._request("GET", f"/{entity_set_name(query.entity_name)}", params=params)
        rows = response.json().get("value", [])

        primary_key = f"{query.entity_name}id"
        entities = []
        for row in rows:
            attributes = {k: v for k, v in row.items() if "@" not in k}
            entity_id = attributes.get(primary_key)
            entities.append(
                Entity(
                    logical_name=query.entity_name,
                    id=UUID(entity_id) if entity_id else None,
                    attributes=attributes,
                )
            )

        logger.debug(f"Retrieved {len(entities)} {query.entity_name} records")
        return entities

    def create(self, entity: Entity) -> UUID:
        response = self._request(
            "POST",
            f"/{entity_set_name(entity.logical_name)}",
            json={k: _serialize(v) for k, v in entity.attributes.items()},
        )

        match = ENTITY_ID_PATTERN.search(response.headers.get("OData-EntityId", ""))
        if not match:
            raise DynamicsAPIError(response.status_code, "Create response did not include an id")
        return UUID(match.group(1))

    def update(self, entity: Entity) -> None:
        if entity.id is None:
            raise ValueError("Cannot update an entity without an id")

        self._request(
            "PATCH",
            f"/{entity_set_name(entity.logical_name)}({entity.id})",
            json={k: _serialize(v) for k, v in entity.attributes.items()},
        )

    def retrieve_entity_attributes(self, logical_name: str) -> list[AttributeMetadata]:
        response = self._request(
            "GET",
            f"/EntityDefinitions(LogicalName='{logical_name}')/Attributes",
            params={"$select": "LogicalName,DisplayName,IsValidForAdvancedFind"},
        )

        attributes = []
        for row in response.json().get("value", []):
            label = (row.get("DisplayName") or {}).get("UserLocalizedLabel") or {}
            advanced_find = row.get("IsValidForAdvancedFind") or {}
            attributes.append(
                AttributeMetadata(
                    logical_name=row["LogicalName"],
                    display_name=label.get("Label"),
                    is_valid_for_advanced_find=bool(advanced_find.get("Value")),
                )
            )
        return attributes
