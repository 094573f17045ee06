"""Resolve Campaign Monitor credentials from the stored configuration."""

import logging
from datetime import datetime, timedelta, timezone

from crm2campmon.campmon.client import CampaignMonitorClient
from crm2campmon.configuration import ConfigurationService
from crm2campmon.exceptions import CampaignMonitorAuthError
from crm2campmon.models import CampaignMonitorConfiguration, OAuthCredentials

logger = logging.getLogger(__name__)


class Authenticator:
    def __init__(self, campmon_client: CampaignMonitorClient, config_service: ConfigurationService):
        self.campmon_client = campmon_client
        self.config_service = config_service

    def get_authentication(self, config: CampaignMonitorConfiguration) -> OAuthCredentials:
        """
        Build credentials from the stored tokens.

        An expired access token is refreshed once and the new tokens are
        written back to the configuration row and to ``config``.
        """
        if not config.access_token or not config.access_token.strip():
            raise CampaignMonitorAuthError("Configuration does not contain an access token")

        if config.token_expired() and config.refresh_token:
            logger.info("Access token expired, refreshing.")
            tokens = self.campmon_client.refresh_token(config.refresh_token)

            config.access_token = tokens["access_token"]
            config.refresh_token = tokens.get("refresh_token", config.refresh_token)
            expires_in = tokens.get("expires_in")
            config.token_valid_to = (
                datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))
                if expires_in
                else None
            )

            self.config_service.save_oauth_token(
                config.id, config.access_token, config.refresh_token, config.token_valid_to
            )

        return OAuthCredentials(
            access_token=config.access_token,
            refresh_token=config.refresh_token,
        )
