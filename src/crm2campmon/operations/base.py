"""Request-scoped context and base class for operations."""

import logging
from abc import ABC, abstractmethod

from crm2campmon.campmon.client import CampaignMonitorClient
from crm2campmon.configuration import ConfigurationService
from crm2campmon.dynamics.entity import OrganizationService


class OperationContext:
    """Collaborators for a single operation invocation."""

    def __init__(
        self,
        org_service: OrganizationService,
        campmon_client: CampaignMonitorClient,
        logger: logging.Logger | None = None,
    ):
        self.org_service = org_service
        self.campmon_client = campmon_client
        self.logger = logger or logging.getLogger("crm2campmon.operations")
        self.config_service = ConfigurationService(org_service)


class Operation(ABC):
    """An operation takes a serialized request and returns a serialized response."""

    name: str = ""

    def __init__(self, context: OperationContext):
        self.context = context
        self.logger = context.logger

    @abstractmethod
    def execute(self, serialized_data: str) -> str: ...
