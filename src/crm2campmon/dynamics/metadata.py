"""Entity metadata lookups."""

import logging

from crm2campmon.dynamics.entity import AttributeMetadata, OrganizationService

logger = logging.getLogger(__name__)


class MetadataHelper:
    def __init__(self, org_service: OrganizationService):
        self.org_service = org_service

    def get_entity_attributes(self, logical_name: str) -> list[AttributeMetadata]:
        """Fetch attribute metadata for an entity."""
        attributes = self.org_service.retrieve_entity_attributes(logical_name)
        logger.debug(f"Retrieved {len(attributes)} attributes for {logical_name}")
        return attributes
