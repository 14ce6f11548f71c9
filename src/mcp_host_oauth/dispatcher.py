# mcp_host_oauth/dispatcher.py
"""Outbound JSON-RPC channel: one HTTP POST per message."""

import itertools
import json
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from .errors import RpcSendError
from .jsonrpc import (
    JsonRpcMessage,
    JsonRpcNotification,
    JsonRpcRequest,
    Params,
    encode_message,
)
from .sse import parse_sse_json

logger = logging.getLogger(__name__)


class DispatchResult(BaseModel):
    """Status and body of an RPC POST, kept for diagnostics only."""

    status_code: int
    body: str = ""
    content_type: str = ""

    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json_body(self) -> Optional[Dict[str, Any]]:
        """Decode the body as JSON or single-event SSE, if possible."""
        if not self.body.strip():
            return None
        try:
            if self.content_type.startswith("text/event-stream"):
                return parse_sse_json(self.body.strip().splitlines())
            data = json.loads(self.body)
        except ValueError:
            return None
        return data if isinstance(data, dict) else None


class RequestDispatcher:
    """
    Sends JSON-RPC messages to ``<server_url>/rpc``.

    The channel is fire-and-forget: replies to requests arrive asynchronously
    on the event stream, never as the POST response, so nothing here waits for
    or correlates responses. Request ids are handed out by ``next_id()``.
    """

    def __init__(
        self,
        server_url: str,
        access_token: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            server_url: Base URL of the MCP server
            access_token: Bearer token sent with every POST
            http_client: HTTP client to use (default: one owned by the dispatcher)
            timeout: HTTP request timeout in seconds
            logger: Logger to use (default: module logger)
        """
        self.rpc_url = server_url.rstrip("/") + "/rpc"
        self.timeout = timeout
        self.log = logger or logging.getLogger(__name__)
        self._access_token = access_token
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        """Assign the next outbound request id (1, 2, 3, ...)."""
        return next(self._ids)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
        }

    async def send(self, message: JsonRpcMessage) -> DispatchResult:
        """
        POST one message.

        Args:
            message: Any JSON-RPC message variant

        Returns:
            DispatchResult with the HTTP status and body

        Raises:
            RpcSendError: If the HTTP request fails
        """
        content = encode_message(message)
        self.log.debug(f"Sending JSON-RPC message to {self.rpc_url}: {content}")

        try:
            response = await self._http_client.post(
                self.rpc_url,
                content=content,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise RpcSendError(f"Failed to POST to {self.rpc_url}: {e}") from e

        result = DispatchResult(
            status_code=response.status_code,
            body=response.text,
            content_type=response.headers.get("content-type", ""),
        )
        if not result.is_success():
            reply = result.json_body()
            if reply is not None and "error" in reply:
                detail = json.dumps(reply["error"])
            else:
                detail = result.body
            self.log.warning(
                f"RPC endpoint returned {result.status_code} for {content}: {detail}"
            )
        return result

    async def request(self, method: str, params: Optional[Params] = None) -> int:
        """Send a request with a fresh id and return that id."""
        request_id = self.next_id()
        await self.send(JsonRpcRequest(id=request_id, method=method, params=params))
        return request_id

    async def notify(self, method: str, params: Optional[Params] = None) -> DispatchResult:
        """Send a notification."""
        return await self.send(JsonRpcNotification(method=method, params=params))

    async def close(self) -> None:
        """Close the HTTP client if the dispatcher created it."""
        if self._owns_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def __aenter__(self) -> "RequestDispatcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
