"""Custom exceptions for crm2campmon."""


class CampmonSyncError(Exception):
    """Base exception for all crm2campmon errors."""


class ConfigurationError(CampmonSyncError):
    """Configuration or environment variable error."""


class DynamicsAPIError(CampmonSyncError):
    """Error from the Dynamics Web API."""

    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        prefix = f"Dynamics API error ({status_code})" if status_code else "Dynamics API request failed"
        super().__init__(f"{prefix}: {message}")


class CampaignMonitorAPIError(CampmonSyncError):
    """Error from the Campaign Monitor API."""

    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        prefix = (
            f"Campaign Monitor API error ({status_code})"
            if status_code
            else "Campaign Monitor API request failed"
        )
        super().__init__(f"{prefix}: {message}")


class CampaignMonitorAuthError(CampmonSyncError):
    """Campaign Monitor OAuth authentication error."""


class UnknownOperationError(CampmonSyncError):
    """Requested operation is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown operation: {name}")
