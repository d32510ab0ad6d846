"""Google OAuth2 access tokens for the Content API."""

import logging
from typing import Optional, Any, Protocol

import httpx
from pydantic import BaseModel

from .config import GoogleConfig
from .exceptions import TokenError

logger = logging.getLogger(__name__)


class AccessToken(BaseModel):
    """Short-lived bearer token."""
    access_token: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = None

    @property
    def authorization(self) -> str:
        return f"Bearer {self.access_token}"


class TokenProvider(Protocol):
    """Anything that can hand out an access token."""

    async def acquire_access_token(self) -> AccessToken:
        ...


class GoogleRefreshTokenProvider:
    """Exchanges a stored refresh token for an access token."""

    def __init__(self, config: GoogleConfig, client: Optional[Any] = None):
        self.config = config
        self.client = client

    async def acquire_access_token(self) -> AccessToken:
        """
        Run the OAuth2 refresh-token grant once.

        Raises:
            TokenError: If the token endpoint rejects the request or is unreachable
        """
        data = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "refresh_token": self.config.refresh_token,
            "grant_type": "refresh_token",
        }
        try:
            if self.client is not None:
                response = await self.client.post(self.config.token_uri, data=data)
            else:
                async with httpx.AsyncClient(timeout=30.0) as client:
                    response = await client.post(self.config.token_uri, data=data)
        except httpx.RequestError as e:
            raise TokenError(f"Token endpoint unreachable: {e}") from e

        if response.status_code != 200:
            raise TokenError(f"Token refresh failed: HTTP {response.status_code} {response.text}")

        try:
            token = AccessToken(**response.json())
        except (ValueError, TypeError) as e:
            raise TokenError(f"Token response without access_token: {e}") from e

        logger.debug("Acquired Google access token (expires in %ss)", token.expires_in)
        return token
