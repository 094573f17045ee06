"""Data models for crm2campmon."""

from datetime import datetime, timezone
from enum import IntEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal


class SubscriberEmail(IntEnum):
    """Contact attribute used as the subscriber email address."""

    EMAILADDRESS1 = 1
    EMAILADDRESS2 = 2
    EMAILADDRESS3 = 3


class CampaignMonitorConfiguration(BaseModel):
    """Integration settings stored in the single configuration row."""

    id: UUID | None = Field(default=None, description="campmon_configurationid")

    # OAuth tokens
    access_token: str | None = None
    refresh_token: str | None = None
    token_valid_to: datetime | None = None

    # Selected Campaign Monitor client and list
    client_id: str | None = None
    client_name: str | None = None
    list_id: str | None = None
    list_name: str | None = None
    set_up_error: str | None = None

    # Sync options
    sync_duplicate_emails: bool = False
    sync_fields: list[str] = Field(default_factory=list, description="Contact logical names")
    sync_view_id: UUID | None = None
    sync_view_name: str | None = None
    subscriber_email: SubscriberEmail = SubscriberEmail.EMAILADDRESS1

    # Bulk sync state (opaque, stored and echoed only)
    bulk_sync_in_progress: bool = False
    bulk_sync_data: str | None = None

    def token_expired(self, now: datetime | None = None) -> bool:
        """True when a stored expiry exists and lies in the past."""
        if self.token_valid_to is None:
            return False
        now = now or datetime.now(timezone.utc)
        valid_to = self.token_valid_to
        if valid_to.tzinfo is None:
            valid_to = valid_to.replace(tzinfo=timezone.utc)
        return valid_to <= now


class OAuthCredentials(BaseModel):
    """Resolved Campaign Monitor OAuth credentials."""

    access_token: str
    refresh_token: str | None = None


class BasicClient(BaseModel):
    """Campaign Monitor client as returned by GET /clients.json."""

    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(alias="ClientID")
    name: str = Field(alias="Name")


class BasicList(BaseModel):
    """Campaign Monitor list as returned by GET /clients/{id}/lists.json."""

    model_config = ConfigDict(populate_by_name=True)

    list_id: str = Field(alias="ListID")
    name: str = Field(alias="Name")


class PascalModel(BaseModel):
    """Base for payloads exchanged with the configuration UI."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class SyncField(PascalModel):
    display_name: str | None = None
    logical_name: str
    is_checked: bool = False
    is_recommended: bool = False


class SyncView(PascalModel):
    view_id: UUID
    view_name: str | None = None
    is_selected: bool = False


class ConfigurationData(PascalModel):
    """Snapshot of stored configuration merged with live CRM and Campaign Monitor data."""

    configuration_exists: bool = False
    error: str | None = None

    clients: list[BasicClient] | None = None
    lists: list[BasicList] | None = None

    id: str | None = None
    bulk_sync_in_progress: bool = False
    sync_duplicate_emails: bool = False
    subscriber_email: int | None = None

    client_id: str | None = None
    client_name: str | None = None
    list_id: str | None = None
    list_name: str | None = None

    views: list[SyncView] | None = None
    fields: list[SyncField] | None = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class SaveConfigurationRequest(PascalModel):
    """Selections posted back by the configuration UI."""

    client_id: str | None = None
    client_name: str | None = None
    list_id: str | None = None
    list_name: str | None = None
    sync_duplicate_emails: bool = False
    subscriber_email: SubscriberEmail = SubscriberEmail.EMAILADDRESS1
    sync_fields: list[str] = Field(default_factory=list)
    sync_view_id: UUID | None = None
    sync_view_name: str | None = None

    def apply_to(self, config: CampaignMonitorConfiguration) -> CampaignMonitorConfiguration:
        """Return a copy of ``config`` with only the posted selections applied."""
        return config.model_copy(update=self.model_dump(exclude_unset=True))


class OperationResult(PascalModel):
    """Response of operations that only report success or failure."""

    error: str | None = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
