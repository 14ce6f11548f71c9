# mcp_host_oauth/token_exchange.py
"""Authorization code to access token exchange."""

import json
import logging
from typing import Optional

import httpx

from .errors import TokenExchangeError, TokenExchangeHttpError, TokenParseError
from .oauth_config import OAuthConfig, OAuthTokens

logger = logging.getLogger(__name__)


class TokenExchangeClient:
    """Exchanges an authorization code at the token endpoint (RFC 6749 4.1.3).

    Makes a single attempt; there is no retry and no refresh handling.
    """

    def __init__(
        self,
        config: OAuthConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the token exchange client.

        Args:
            config: OAuth configuration (token URL and client credentials)
            http_client: HTTP client to use (default: a client per exchange)
            timeout: HTTP request timeout in seconds
            logger: Logger to use (default: module logger)
        """
        self.config = config
        self.timeout = timeout
        self.log = logger or logging.getLogger(__name__)
        self._http_client = http_client

    def _form_data(self, code: str) -> dict[str, str]:
        return {
            "grant_type": "authorization_code",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "redirect_uri": self.config.redirect_uri,
            "code": code,
        }

    async def _post(self, data: dict[str, str]) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if self._http_client is not None:
            return await self._http_client.post(
                self.config.token_url, data=data, headers=headers, timeout=self.timeout
            )
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.config.token_url, data=data, headers=headers)

    async def exchange(self, code: str) -> OAuthTokens:
        """
        Exchange an authorization code for a bearer token.

        Args:
            code: Authorization code from the redirect

        Returns:
            OAuthTokens with the issued access token

        Raises:
            TokenExchangeHttpError: If the endpoint returns a non-2xx status
            TokenParseError: If the body has no string ``access_token``
            TokenExchangeError: If the request itself fails
        """
        self.log.debug(
            f"Exchanging authorization code at {self.config.token_url} "
            f"for client {self.config.client_id}"
        )

        try:
            response = await self._post(self._form_data(code))
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"HTTP error during token exchange: {e}") from e

        body = response.text
        if not response.is_success:
            self.log.error(f"Token exchange failed: {response.status_code}")
            self.log.debug(f"Response: {body}")
            raise TokenExchangeHttpError(response.status_code, body)

        tokens = self.parse_token_response(body)
        self.log.info("Token exchange successful")
        return tokens

    @staticmethod
    def parse_token_response(body: str) -> OAuthTokens:
        """
        Parse a successful token endpoint body.

        Args:
            body: Raw response text

        Returns:
            OAuthTokens built from ``access_token`` (plus ``token_type``/``scope``)

        Raises:
            TokenParseError: If the body is not a JSON object with a string
                ``access_token``
        """
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise TokenParseError(body, f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise TokenParseError(body, "expected a JSON object")

        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise TokenParseError(body)

        token_type = data.get("token_type")
        scope = data.get("scope")
        return OAuthTokens(
            access_token=access_token,
            token_type=token_type if isinstance(token_type, str) else "Bearer",
            scope=scope if isinstance(scope, str) else None,
        )
