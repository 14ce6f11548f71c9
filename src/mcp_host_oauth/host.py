# mcp_host_oauth/host.py
"""MCP host: OAuth authentication followed by a streaming JSON-RPC session."""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import httpx

from .config import HostConfig
from .dispatcher import RequestDispatcher
from .jsonrpc import Params
from .launcher import UserAgentLauncher
from .oauth_config import OAuthTokens
from .oauth_flow import OAuthFlow
from .router import MessageCallback, MessageRouter
from .streaming_client import StreamingProtocolClient
from .token_exchange import TokenExchangeClient

logger = logging.getLogger(__name__)

CLIENT_INFO = {"name": "mcp-host-oauth", "version": "0.1.0"}
PROTOCOL_VERSION = "2024-11-05"

InitialMessage = Tuple[str, Optional[Params]]

# Sent sequentially before the stream is read. Methods under "notifications/"
# go out as notifications, everything else as requests.
MCP_HANDSHAKE: List[InitialMessage] = [
    (
        "initialize",
        {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"roots": {"listChanged": True}, "sampling": {}},
            "clientInfo": CLIENT_INFO,
        },
    ),
    ("notifications/initialized", None),
    ("tools/list", {}),
]


class MCPHost:
    """Authenticates against an OAuth provider and talks to one MCP server.

    Tokens are kept in memory for the lifetime of the host only.
    """

    def __init__(
        self,
        config: HostConfig,
        launcher: Optional[UserAgentLauncher] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        callback_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the host.

        Args:
            config: OAuth settings and MCP server URL
            launcher: Opens the authorization URL (default: system browser)
            http_client: Shared HTTP client (default: clients created per call)
            callback_timeout: Seconds to wait for the OAuth redirect
            read_timeout: Seconds allowed between stream lines
            logger: Logger to use (default: module logger)
        """
        self.config = config
        self.launcher = launcher
        self.callback_timeout = callback_timeout
        self.read_timeout = read_timeout
        self.log = logger or logging.getLogger(__name__)
        self.tokens: Optional[OAuthTokens] = None
        self._http_client = http_client

    async def authenticate(self, state: Optional[str] = None) -> OAuthTokens:
        """
        Run the authorization-code flow and keep the resulting token.

        Args:
            state: CSRF state to send (default: a fresh random value)

        Returns:
            Issued bearer token

        Raises:
            OAuthFlowError: If any step of the flow fails
        """
        flow = OAuthFlow(
            self.config.oauth,
            launcher=self.launcher,
            token_client=TokenExchangeClient(
                self.config.oauth, http_client=self._http_client, logger=self.log
            ),
            callback_timeout=self.callback_timeout,
            logger=self.log,
        )
        self.tokens = await flow.authorize(state)
        self.log.info(f"Successfully authenticated client {self.config.oauth.client_id}")
        return self.tokens

    def get_authorization_header(self) -> Optional[str]:
        """Authorization header value, or None before authentication."""
        if self.tokens is None:
            return None
        return self.tokens.get_authorization_header()

    def prepare_headers(
        self, extra_headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, str]:
        """
        Prepare HTTP headers carrying the bearer token.

        Raises:
            RuntimeError: If called before authenticate()
        """
        headers: Dict[str, str] = extra_headers.copy() if extra_headers else {}
        authorization = self.get_authorization_header()
        if authorization is None:
            raise RuntimeError("Not authenticated; call authenticate() first")
        headers["Authorization"] = authorization
        return headers

    def clear_tokens(self) -> None:
        self.tokens = None

    async def run(
        self,
        initial_messages: Optional[Sequence[InitialMessage]] = None,
        on_message: Optional[MessageCallback] = None,
    ) -> int:
        """
        Send the initial messages, then route stream events until it closes.

        Args:
            initial_messages: (method, params) pairs sent before listening
                (default: the MCP initialize handshake and tools/list)
            on_message: Called with every inbound response/notification

        Returns:
            Number of events received on the stream

        Raises:
            RuntimeError: If called before authenticate()
            RpcSendError: If an initial message cannot be sent
            StreamError: If the stream cannot be opened or breaks
        """
        if self.tokens is None:
            raise RuntimeError("Not authenticated; call authenticate() first")
        token = self.tokens.access_token
        server_url = self.config.server_url
        messages = MCP_HANDSHAKE if initial_messages is None else initial_messages

        async with RequestDispatcher(
            server_url, token, http_client=self._http_client, logger=self.log
        ) as dispatcher:
            for method, params in messages:
                if method.startswith("notifications/"):
                    await dispatcher.notify(method, params)
                else:
                    request_id = await dispatcher.request(method, params)
                    self.log.info(f"Sent {method} request (id={request_id})")

            router = MessageRouter(dispatcher, on_message=on_message, logger=self.log)
            stream = StreamingProtocolClient(
                router,
                http_client=self._http_client,
                read_timeout=self.read_timeout,
                logger=self.log,
            )
            return await stream.listen(server_url, token)
