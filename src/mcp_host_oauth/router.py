# mcp_host_oauth/router.py
"""Routing of inbound JSON-RPC messages."""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from .dispatcher import RequestDispatcher
from .errors import RpcSendError
from .jsonrpc import (
    JsonRpcErrorResponse,
    JsonRpcMessage,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
)

logger = logging.getLogger(__name__)

MessageCallback = Callable[[JsonRpcMessage], Union[None, Awaitable[None]]]


class MessageRouter:
    """
    Classifies inbound messages and answers the ones we know how to answer.

    Only ``ping`` requests are handled: they get an empty-result response with
    the same id. Other requests are logged and left unanswered. Responses,
    error responses and notifications are logged and passed to ``on_message``.
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        on_message: Optional[MessageCallback] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.dispatcher = dispatcher
        self.on_message = on_message
        self.log = logger or logging.getLogger(__name__)

    async def route(self, message: JsonRpcMessage) -> Optional[JsonRpcResponse]:
        """
        Handle one inbound message.

        Args:
            message: Parsed JSON-RPC message from the stream

        Returns:
            The reply that was sent, if any
        """
        if isinstance(message, JsonRpcRequest):
            return await self._handle_request(message)

        if isinstance(message, JsonRpcResponse):
            self.log.info(f"Received response for request {message.id}")
        elif isinstance(message, JsonRpcErrorResponse):
            self.log.warning(
                f"Received error for request {message.id}: "
                f"{message.error.code} {message.error.message}"
            )
        elif isinstance(message, JsonRpcNotification):
            self.log.info(f"Received notification: {message.method}")

        await self._notify_listener(message)
        return None

    async def _handle_request(self, request: JsonRpcRequest) -> Optional[JsonRpcResponse]:
        if request.method != "ping":
            self.log.warning(
                f"Unhandled request method '{request.method}' (id={request.id}); no reply sent"
            )
            return None

        reply = JsonRpcResponse(id=request.id, result={})
        try:
            await self.dispatcher.send(reply)
        except RpcSendError as e:
            self.log.error(f"Failed to answer ping {request.id}: {e}")
            return None

        self.log.debug(f"Answered ping {request.id}")
        return reply

    async def _notify_listener(self, message: JsonRpcMessage) -> None:
        if self.on_message is None:
            return
        outcome: Any = self.on_message(message)
        if inspect.isawaitable(outcome):
            await outcome
