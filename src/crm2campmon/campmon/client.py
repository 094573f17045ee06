"""Campaign Monitor API client with OAuth2 bearer auth."""

import httpx

from crm2campmon.config import Settings
from crm2campmon.exceptions import CampaignMonitorAPIError, CampaignMonitorAuthError
from crm2campmon.models import BasicClient, BasicList, OAuthCredentials


class CampaignMonitorClient:
    """Synchronous client for the Campaign Monitor v3.3 API."""

    def __init__(self, settings: Settings, client: httpx.Client | None = None):
        self.settings = settings
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
        auth: OAuthCredentials,
        method: str,
        endpoint: str,
        params: dict | None = None,
    ) -> dict | list:
        """Make authenticated API request."""
        client = self._get_client()

        try:
            response = client.request(
                method,
                f"{self.settings.campmon_api_url.rstrip('/')}{endpoint}",
                params=params,
                headers={"Authorization": f"Bearer {auth.access_token}"},
            )
        except httpx.HTTPError as e:
            raise CampaignMonitorAPIError(None, str(e)) from e

        if response.status_code >= 400:
            raise CampaignMonitorAPIError(response.status_code, response.text)

        return response.json()

    def refresh_token(self, refresh_token: str) -> dict:
        """
        Exchange a refresh token for a new access token.

        Returns dict with access_token, expires_in and refresh_token.
        """
        client = self._get_client()

        try:
            response = client.post(
                self.settings.campmon_token_url,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": refresh_token,
                },
            )
        except httpx.HTTPError as e:
            raise CampaignMonitorAuthError(f"Token refresh request failed: {e}") from e

        if response.status_code != 200:
            raise CampaignMonitorAuthError(
                f"Token refresh failed ({response.status_code}): {response.text}"
            )

        return response.json()

    def get_clients(self, auth: OAuthCredentials) -> list[BasicClient]:
        """List the clients visible to the authenticated account."""
        data = self._request(auth, "GET", "/clients.json")
        return [BasicClient.model_validate(item) for item in data]

    def get_lists(self, auth: OAuthCredentials, client_id: str) -> list[BasicList]:
        """List the subscriber lists of one client."""
        data = self._request(auth, "GET", f"/clients/{client_id}/lists.json")
        return [BasicList.model_validate(item) for item in data]
