# mcp_host_oauth/streaming_client.py
"""Inbound JSON-RPC channel: a long-lived ``text/event-stream`` GET."""

import logging
from contextlib import aclosing, asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from .errors import MessageParseError, StreamConnectError, StreamReadError
from .jsonrpc import JsonRpcMessage, parse_message
from .router import MessageRouter
from .sse import SseEvent, aiter_sse_events

logger = logging.getLogger(__name__)


class StreamingProtocolClient:
    """
    Reads the server's event stream and forwards JSON-RPC payloads.

    Each ``connect()`` call is a fresh stream; nothing reconnects when the
    server closes it. Events whose data is not a valid JSON-RPC envelope are
    logged and dropped without interrupting the stream.
    """

    def __init__(
        self,
        router: Optional[MessageRouter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        connect_timeout: float = 30.0,
        read_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the streaming client.

        Args:
            router: Receives every parsed message (optional for raw ``connect``)
            http_client: HTTP client to use (default: one per connection)
            connect_timeout: Seconds allowed to establish the connection
            read_timeout: Seconds allowed between lines (None waits forever)
            logger: Logger to use (default: module logger)
        """
        self.router = router
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.log = logger or logging.getLogger(__name__)
        self._http_client = http_client

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient() as client:
            yield client

    async def connect(self, server_url: str, token: str) -> AsyncIterator[SseEvent]:
        """
        Open the event stream and yield its events.

        Iteration ends normally when the server closes the stream. Breaking out
        of the loop (or cancelling the task) closes the connection.

        Args:
            server_url: Base URL of the MCP server
            token: Bearer token

        Yields:
            SseEvent for each blank-line terminated block

        Raises:
            StreamConnectError: If the request fails or the status is not 2xx
            StreamReadError: If the connection breaks while reading
        """
        sse_url = server_url.rstrip("/") + "/sse"
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "text/event-stream",
            "Cache-Control": "no-cache",
        }
        timeout = httpx.Timeout(self.connect_timeout, read=self.read_timeout)

        self.log.info(f"Connecting to SSE endpoint: {sse_url}")
        connected = False
        async with self._client() as client:
            try:
                async with client.stream(
                    "GET", sse_url, headers=headers, timeout=timeout
                ) as response:
                    if not response.is_success:
                        body = (await response.aread()).decode("utf-8", "replace")
                        self.log.error(
                            f"Failed to connect to MCP SSE server. Status: {response.status_code}"
                        )
                        raise StreamConnectError(response.status_code, body)

                    connected = True
                    self.log.info("Connected to MCP SSE server, listening for events")
                    async for event in aiter_sse_events(response.aiter_lines()):
                        yield event
            except httpx.HTTPError as e:
                if not connected:
                    raise StreamConnectError(None, str(e)) from e
                raise StreamReadError(f"Event stream read failed: {e}") from e

        self.log.info("Event stream closed")

    async def handle_event(self, event: SseEvent) -> Optional[JsonRpcMessage]:
        """
        Parse one event and pass it to the router.

        Returns:
            The parsed message, or None if the payload was dropped
        """
        self.log.debug(f"Event type: {event.event_type}, data: {event.data}")
        try:
            message = parse_message(event.data)
        except MessageParseError as e:
            self.log.warning(f"Dropping malformed message ({e.reason}): {event.data!r}")
            return None

        if self.router is not None:
            await self.router.route(message)
        return message

    async def listen(self, server_url: str, token: str) -> int:
        """
        Connect and route every event until the server closes the stream.

        Returns:
            Number of events received
        """
        count = 0
        async with aclosing(self.connect(server_url, token)) as events:
            async for event in events:
                count += 1
                await self.handle_event(event)
        return count
