"""Forget the stored Campaign Monitor tokens."""

from crm2campmon.models import OperationResult
from crm2campmon.operations.base import Operation


class DisconnectOperation(Operation):
    name = "disconnect"

    def execute(self, serialized_data: str) -> str:
        try:
            config_id = self.context.config_service.get_config_id()
            if config_id is None:
                self.logger.info("No configuration record, nothing to disconnect.")
            else:
                self.logger.info("Clearing OAuth token.")
                self.context.config_service.clear_oauth_token(config_id)
            result = OperationResult()
        except Exception as e:
            self.logger.exception("Error clearing OAuth token.")
            result = OperationResult(error=f"Unable to disconnect. {e}")

        return result.to_json()
