"""Tests for inbound message routing."""

from unittest.mock import AsyncMock, Mock

import pytest

from mcp_host_oauth.errors import RpcSendError
from mcp_host_oauth.jsonrpc import (
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
)
from mcp_host_oauth.router import MessageRouter


@pytest.fixture
def dispatcher():
    """Provide a dispatcher whose sends always succeed."""
    mock = Mock()
    mock.send = AsyncMock()
    return mock


class TestMessageRouter:
    """Test MessageRouter."""

    @pytest.mark.asyncio
    async def test_ping_is_answered(self, dispatcher):
        """Test a ping request gets an empty result with the same id."""
        router = MessageRouter(dispatcher)

        reply = await router.route(JsonRpcRequest(id=42, method="ping"))

        assert reply == JsonRpcResponse(id=42, result={})
        dispatcher.send.assert_awaited_once_with(JsonRpcResponse(id=42, result={}))

    @pytest.mark.asyncio
    async def test_ping_with_string_id(self, dispatcher):
        """Test string ids are echoed unchanged."""
        router = MessageRouter(dispatcher)
        reply = await router.route(JsonRpcRequest(id="p-1", method="ping"))
        assert reply is not None
        assert reply.id == "p-1"

    @pytest.mark.asyncio
    async def test_ping_does_not_reach_listener(self, dispatcher):
        """Test handled requests are not forwarded."""
        on_message = Mock()
        router = MessageRouter(dispatcher, on_message=on_message)
        await router.route(JsonRpcRequest(id=1, method="ping"))
        on_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_ping_send_failure_is_logged(self, dispatcher, caplog):
        """Test a failed reply does not raise."""
        dispatcher.send.side_effect = RpcSendError("down")
        router = MessageRouter(dispatcher)

        reply = await router.route(JsonRpcRequest(id=3, method="ping"))

        assert reply is None
        assert "Failed to answer ping 3" in caplog.text

    @pytest.mark.asyncio
    async def test_other_requests_unanswered(self, dispatcher, caplog):
        """Test unknown request methods get no reply."""
        router = MessageRouter(dispatcher)

        reply = await router.route(JsonRpcRequest(id=4, method="sampling/createMessage"))

        assert reply is None
        dispatcher.send.assert_not_called()
        assert "sampling/createMessage" in caplog.text

    @pytest.mark.asyncio
    async def test_response_forwarded(self, dispatcher):
        """Test responses reach a sync listener."""
        on_message = Mock()
        router = MessageRouter(dispatcher, on_message=on_message)
        message = JsonRpcResponse(id=1, result={"tools": []})

        assert await router.route(message) is None

        on_message.assert_called_once_with(message)
        dispatcher.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_error_and_notification_forwarded_async(self, dispatcher):
        """Test async listeners are awaited."""
        on_message = AsyncMock()
        router = MessageRouter(dispatcher, on_message=on_message)
        error = JsonRpcErrorResponse(
            id=2, error=JsonRpcError(code=-32601, message="Method not found")
        )
        notification = JsonRpcNotification(method="notifications/tools/list_changed")

        await router.route(error)
        await router.route(notification)

        assert [c.args[0] for c in on_message.await_args_list] == [error, notification]

    @pytest.mark.asyncio
    async def test_no_listener(self, dispatcher):
        """Test routing works without a listener."""
        router = MessageRouter(dispatcher)
        assert await router.route(JsonRpcNotification(method="x")) is None
