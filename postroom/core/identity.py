import logging
from typing import Optional

import httpx

from .config import Settings, settings as default_settings
from .errors import ProviderVerificationFailed, UnsupportedProvider
from ..models.user import AccountProvider

logger = logging.getLogger(__name__)


class IdentityVerifier:
    """
    Resolves an OAuth access token to the verified email address of its owner.

    Google and Facebook expose a user-info endpoint that accepts the access
    token as a query parameter; an error status or a response without an
    email means the token could not be verified.
    """

    def __init__(self, settings: Settings = default_settings, client: Optional[httpx.AsyncClient] = None):
        self._settings = settings
        self._client = client

    def resolve_provider(self, provider_name: str) -> AccountProvider:
        try:
            provider = AccountProvider((provider_name or "").lower())
        except ValueError:
            raise UnsupportedProvider(provider_name)
        if provider not in (AccountProvider.GOOGLE, AccountProvider.FACEBOOK):
            raise UnsupportedProvider(provider_name)
        return provider

    def _request(self, provider: AccountProvider, token: str) -> tuple[str, dict]:
        if provider == AccountProvider.GOOGLE:
            return self._settings.GOOGLE_USERINFO_URL, {"alt": "json", "access_token": token}
        return self._settings.FACEBOOK_USERINFO_URL, {"fields": "id,email", "access_token": token}

    async def verify(self, provider_name: str, token: str) -> str:
        """Return the verified email for ``token``."""
        provider = self.resolve_provider(provider_name)
        url, params = self._request(provider, token)

        try:
            if self._client is not None:
                response = await self._client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self._settings.PROVIDER_TIMEOUT_SECONDS) as client:
                    response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"{provider.value} token verification failed: {e}")
            raise ProviderVerificationFailed(provider.value) from e

        email = data.get("email") if isinstance(data, dict) else None
        if not email:
            raise ProviderVerificationFailed(provider.value, message="Provider did not return an email address")
        return email
