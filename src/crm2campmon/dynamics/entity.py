"""Query and record primitives for the Dynamics organization service."""

from typing import Any, Protocol
from uuid import UUID

from pydantic import BaseModel, Field


class Entity(BaseModel):
    """A CRM record: logical name, primary id and attribute values."""

    logical_name: str
    id: UUID | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)

    def get_attribute_value(self, name: str, default: Any = None) -> Any:
        value = self.attributes.get(name)
        return default if value is None else value

    def __setitem__(self, name: str, value: Any) -> None:
        self.attributes[name] = value


class ConditionExpression(BaseModel):
    """Equality condition on a single attribute."""

    attribute: str
    value: Any


class QueryExpression(BaseModel):
    """Structured query: entity, column projection, equality filters, top-N."""

    entity_name: str
    columns: list[str] = Field(default_factory=list)
    conditions: list[ConditionExpression] = Field(default_factory=list)
    top_count: int | None = None

    def add_condition(self, attribute: str, value: Any) -> "QueryExpression":
        self.conditions.append(ConditionExpression(attribute=attribute, value=value))
        return self


class AttributeMetadata(BaseModel):
    """Subset of attribute metadata needed to offer sync fields."""

    logical_name: str
    display_name: str | None = None
    is_valid_for_advanced_find: bool = False


class OrganizationService(Protocol):
    """Operations the integration needs from the CRM."""

    def retrieve_multiple(self, query: QueryExpression) -> list[Entity]: ...

    def create(self, entity: Entity) -> UUID: ...

    def update(self, entity: Entity) -> None: ...

    def retrieve_entity_attributes(self, logical_name: str) -> list[AttributeMetadata]: ...
