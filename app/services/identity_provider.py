"""
Discord OAuth2 client used to identify users at login
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import Request

from app.core.config import Settings
from app.schemas.user import IdentityProfile

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """The identity provider rejected the login or could not be reached."""


class DiscordIdentityProvider:
    """
    Minimal Discord OAuth2 authorization-code client.

    Only the two calls the login flow needs are implemented: exchanging an
    authorization code for an access token and reading the user behind it.
    """

    SCOPES = ["identify"]

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http_client = http_client

    def authorize_url(self, state: str) -> str:
        params = {
            "client_id": self.settings.DISCORD_CLIENT_ID,
            "redirect_uri": self.settings.DISCORD_REDIRECT_URI,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "state": state,
        }
        return f"{self.settings.DISCORD_API_BASE}/oauth2/authorize?{urlencode(params)}"

    async def _client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(base_url=self.settings.DISCORD_API_BASE, timeout=10.0)
        return self._http_client

    async def fetch_profile(self, code: str) -> IdentityProfile:
        """Exchange an authorization code and return the caller's identity"""
        client = await self._client()

        try:
            token_response = await client.post(
                "/oauth2/token",
                data={
                    "client_id": self.settings.DISCORD_CLIENT_ID,
                    "client_secret": self.settings.DISCORD_CLIENT_SECRET,
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.settings.DISCORD_REDIRECT_URI,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            token_response.raise_for_status()
            access_token = token_response.json()["access_token"]

            user_response = await client.get(
                "/users/@me",
                headers={"Authorization": f"Bearer {access_token}"},
            )
            user_response.raise_for_status()
            data = user_response.json()

            return IdentityProfile(
                external_id=str(data["id"]),
                display_name=data.get("global_name") or data.get("username") or str(data["id"]),
                avatar_ref=data.get("avatar"),
            )
        except httpx.HTTPStatusError as e:
            logger.warning(f"Identity provider rejected login: {e.response.status_code}")
            raise IdentityProviderError("Login was rejected by the identity provider") from e
        except (httpx.RequestError, KeyError, ValueError) as e:
            logger.error(f"Identity provider request failed: {e}")
            raise IdentityProviderError("Identity provider is unavailable") from e

    async def close(self) -> None:
        if self._http_client is not None and not self._http_client.is_closed:
            await self._http_client.aclose()


def get_identity_provider(request: Request) -> DiscordIdentityProvider:
    return request.app.state.identity_provider
