# mcp_host_oauth/oauth_flow.py
"""OAuth 2.0 authorization-code flow with a local redirect receiver."""

import logging
import secrets
import warnings
from enum import Enum
from typing import Callable, Optional
from urllib.parse import quote

from .callback_receiver import CallbackReceiver
from .errors import (
    BrowserLaunchWarning,
    CallbackError,
    MissingCodeError,
    StateMismatchError,
)
from .launcher import UserAgentLauncher, WebBrowserLauncher
from .oauth_config import AuthorizationResult, OAuthConfig, OAuthTokens
from .token_exchange import TokenExchangeClient

logger = logging.getLogger(__name__)


class FlowState(str, Enum):
    """Where an authorization attempt currently is."""

    IDLE = "idle"
    LISTENER_ARMED = "listener_armed"
    BROWSER_LAUNCHED = "browser_launched"
    AWAITING_CALLBACK = "awaiting_callback"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    MISMATCHED = "mismatched"


def generate_state() -> str:
    """Generate a fresh, URL-safe CSRF state value."""
    return secrets.token_urlsafe(32)


def build_authorization_url(config: OAuthConfig, state: str) -> str:
    """
    Build the URL the user agent is sent to.

    ``redirect_uri`` and ``scope`` are percent-encoded; ``client_id`` and
    ``state`` are appended as given.
    """
    separator = "&" if "?" in config.authorization_url else "?"
    return (
        f"{config.authorization_url}{separator}client_id={config.client_id}"
        f"&redirect_uri={quote(config.redirect_uri, safe='')}"
        f"&response_type=code"
        f"&state={state}"
        f"&scope={quote(config.scope, safe='')}"
    )


def _states_match(expected: str, received: Optional[str]) -> bool:
    if received is None:
        return False
    return secrets.compare_digest(expected.encode(), received.encode())


class OAuthFlow:
    """
    Drives one authorization-code flow.

    The flow arms a CallbackReceiver on ``config.redirect_uri``, hands the
    authorization URL to the launcher, waits for the redirect and validates it
    before the code is exchanged for a token. ``state`` tracks progress through
    ``FlowState``.
    """

    def __init__(
        self,
        config: OAuthConfig,
        launcher: Optional[UserAgentLauncher] = None,
        token_client: Optional[TokenExchangeClient] = None,
        callback_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
        receiver_factory: Callable[..., CallbackReceiver] = CallbackReceiver,
    ):
        """
        Initialize the flow.

        Args:
            config: OAuth configuration
            launcher: Opens the authorization URL (default: system browser)
            token_client: Exchanges the code (default: TokenExchangeClient(config))
            callback_timeout: Seconds to wait for the redirect (None waits forever)
            logger: Logger to use (default: module logger)
            receiver_factory: Builds the redirect receiver
        """
        self.config = config
        self.launcher = launcher or WebBrowserLauncher()
        self.log = logger or logging.getLogger(__name__)
        self.token_client = token_client or TokenExchangeClient(config, logger=self.log)
        self.callback_timeout = callback_timeout
        self.state = FlowState.IDLE
        self._receiver_factory = receiver_factory

    def _transition(self, state: FlowState) -> None:
        self.log.debug(f"OAuth flow: {self.state.value} -> {state.value}")
        self.state = state

    def _launch_user_agent(self, url: str) -> None:
        """Open the authorization URL; failures only warn."""
        self.log.info(f"Opening browser to: {url}")
        try:
            opened = self.launcher.open(url)
            reason = "no browser available"
        except Exception as e:
            opened = False
            reason = str(e)

        if opened:
            return

        warnings.warn(
            BrowserLaunchWarning(f"Could not open browser automatically: {reason}"),
            stacklevel=3,
        )
        self.log.warning(f"Could not open browser automatically: {reason}")
        self.log.warning(f"Please manually open this URL in your browser:\n{url}")

    def _check_callback(self, result: AuthorizationResult, expected_state: str) -> str:
        """Apply the terminal policy to the callback and return the code."""
        if result.error:
            self._transition(FlowState.DENIED)
            self.log.error(f"OAuth error: {result.error}")
            raise CallbackError(result.error, result.error_description)

        if not result.code:
            self._transition(FlowState.DENIED)
            self.log.error("No authorization code received")
            raise MissingCodeError()

        if not _states_match(expected_state, result.state):
            self._transition(FlowState.MISMATCHED)
            self.log.error("State parameter mismatch - possible CSRF attack")
            raise StateMismatchError(expected_state, result.state)

        self._transition(FlowState.AUTHORIZED)
        return result.code

    async def request_authorization_code(self, state: Optional[str] = None) -> str:
        """
        Run the browser leg of the flow and return the validated code.

        Args:
            state: CSRF state to send (default: a fresh random value)

        Returns:
            Authorization code

        Raises:
            ListenerBindError: If the redirect address cannot be bound
            CallbackTimeoutError: If callback_timeout elapsed
            CallbackError: If the server redirected back with an error
            MissingCodeError: If the callback had no code
            StateMismatchError: If the callback state differs from ``state``
        """
        if self.state is not FlowState.IDLE:
            raise RuntimeError("OAuthFlow instances run a single authorization attempt")

        expected_state = state if state is not None else generate_state()
        self.log.info("Starting OAuth flow...")

        async with self._receiver_factory(
            self.config.redirect_uri,
            timeout=self.callback_timeout,
            logger=self.log,
        ) as receiver:
            self._transition(FlowState.LISTENER_ARMED)

            self._launch_user_agent(build_authorization_url(self.config, expected_state))
            self._transition(FlowState.BROWSER_LAUNCHED)

            self._transition(FlowState.AWAITING_CALLBACK)
            result = await receiver.receive()

        return self._check_callback(result, expected_state)

    async def authorize(self, state: Optional[str] = None) -> OAuthTokens:
        """
        Perform the full flow: authorization, then code exchange.

        Args:
            state: CSRF state to send (default: a fresh random value)

        Returns:
            Bearer token issued by the token endpoint

        Raises:
            OAuthFlowError: Any failure of the attempt; nothing is retried
        """
        code = await self.request_authorization_code(state)
        self.log.info("Authorization code received, exchanging for token...")
        return await self.token_client.exchange(code)
