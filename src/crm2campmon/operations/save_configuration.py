"""Persist the selections made in the setup UI."""

from crm2campmon.exceptions import ConfigurationError
from crm2campmon.models import OperationResult, SaveConfigurationRequest
from crm2campmon.operations.base import Operation


class SaveConfigurationOperation(Operation):
    name = "save_configuration"

    def execute(self, serialized_data: str) -> str:
        try:
            request = SaveConfigurationRequest.model_validate_json(serialized_data or "{}")

            config = self.context.config_service.load()
            if config is None:
                raise ConfigurationError("Campaign Monitor is not connected")

            self.context.config_service.save(request.apply_to(config))
            result = OperationResult()
        except Exception as e:
            self.logger.exception("Error saving configuration.")
            result = OperationResult(error=f"Unable to save configuration. {e}")

        return result.to_json()
