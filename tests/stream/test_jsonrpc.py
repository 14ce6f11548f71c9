"""Tests for JSON-RPC envelope parsing and serialization."""

import json

import pytest

from mcp_host_oauth.errors import MessageParseError
from mcp_host_oauth.jsonrpc import (
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    encode_message,
    parse_message,
    serialize_message,
)


class TestParseMessage:
    """Test classification of inbound payloads."""

    def test_request(self):
        """Test method plus id is a request."""
        message = parse_message('{"jsonrpc":"2.0","id":7,"method":"ping"}')
        assert isinstance(message, JsonRpcRequest)
        assert message.id == 7
        assert message.method == "ping"
        assert message.params is None

    def test_request_with_string_id(self):
        """Test string ids are kept as strings."""
        message = parse_message('{"jsonrpc":"2.0","id":"a-1","method":"x","params":{"k":1}}')
        assert message.id == "a-1"
        assert message.params == {"k": 1}

    def test_notification(self):
        """Test method without id is a notification."""
        message = parse_message(
            '{"jsonrpc":"2.0","method":"notifications/tools/list_changed"}'
        )
        assert isinstance(message, JsonRpcNotification)
        assert message.method == "notifications/tools/list_changed"

    def test_response(self):
        """Test result makes a response."""
        message = parse_message('{"jsonrpc":"2.0","id":1,"result":{"tools":[]}}')
        assert isinstance(message, JsonRpcResponse)
        assert message.result == {"tools": []}

    def test_null_result_is_response(self):
        """Test a present-but-null result still makes a response."""
        message = parse_message('{"jsonrpc":"2.0","id":1,"result":null}')
        assert isinstance(message, JsonRpcResponse)
        assert message.result is None

    def test_error_response(self):
        """Test error makes an error response."""
        message = parse_message(
            '{"jsonrpc":"2.0","id":2,"error":{"code":-32601,"message":"Method not found"}}'
        )
        assert isinstance(message, JsonRpcErrorResponse)
        assert message.error.code == -32601
        assert message.error.message == "Method not found"

    def test_error_response_with_null_id(self):
        """Test an error response for an unreadable request id."""
        message = parse_message(
            '{"jsonrpc":"2.0","id":null,"error":{"code":-32700,"message":"Parse error"}}'
        )
        assert isinstance(message, JsonRpcErrorResponse)
        assert message.id is None

    def test_accepts_dict_and_bytes(self):
        """Test already-decoded and byte payloads."""
        assert isinstance(
            parse_message({"jsonrpc": "2.0", "id": 1, "method": "ping"}), JsonRpcRequest
        )
        assert isinstance(
            parse_message(b'{"jsonrpc":"2.0","method":"x"}'), JsonRpcNotification
        )

    @pytest.mark.parametrize(
        "payload,reason",
        [
            ("not json", "invalid JSON"),
            ("[1, 2]", "expected a JSON object"),
            ('{"id":1,"method":"ping"}', "jsonrpc"),
            ('{"jsonrpc":"1.0","id":1,"method":"ping"}', "jsonrpc"),
            ('{"jsonrpc":"2.0","id":1,"result":{},"error":{"code":1,"message":"x"}}', "both"),
            ('{"jsonrpc":"2.0","id":1,"method":"x","result":{}}', "request carries"),
            ('{"jsonrpc":"2.0","id":1}', "not a request"),
            ('{"jsonrpc":"2.0","method":42}', "invalid JsonRpcNotification"),
            ('{"jsonrpc":"2.0","id":1,"error":{"message":"no code"}}', "invalid JsonRpcErrorResponse"),
        ],
    )
    def test_invalid_envelopes(self, payload, reason):
        """Test malformed envelopes raise MessageParseError."""
        with pytest.raises(MessageParseError) as exc_info:
            parse_message(payload)
        assert reason in exc_info.value.reason

    def test_parse_error_keeps_data(self):
        """Test the raw payload is kept for diagnostics."""
        with pytest.raises(MessageParseError) as exc_info:
            parse_message("garbage")
        assert exc_info.value.data == "garbage"
        assert isinstance(exc_info.value, ValueError)


class TestSerializeMessage:
    """Test wire encoding."""

    def test_ping_reply_bytes(self):
        """Test the exact compact encoding of an empty result."""
        reply = JsonRpcResponse(id=5, result={})
        assert encode_message(reply) == '{"jsonrpc":"2.0","id":5,"result":{}}'

    def test_request_omits_missing_params(self):
        """Test params are only present when given."""
        assert serialize_message(JsonRpcRequest(id=1, method="ping")) == {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "ping",
        }
        assert serialize_message(JsonRpcRequest(id=2, method="tools/list", params={})) == {
            "jsonrpc": "2.0",
            "id": 2,
            "method": "tools/list",
            "params": {},
        }

    def test_notification(self):
        """Test notifications carry no id."""
        wire = serialize_message(JsonRpcNotification(method="notifications/initialized"))
        assert wire == {"jsonrpc": "2.0", "method": "notifications/initialized"}

    def test_error_response(self):
        """Test error responses keep a null id and drop empty data."""
        wire = serialize_message(
            JsonRpcErrorResponse(error=JsonRpcError(code=-32700, message="Parse error"))
        )
        assert wire == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32700, "message": "Parse error"},
        }

    def test_parse_serialized_message(self):
        """Test a serialized request parses back to an equal message."""
        request = JsonRpcRequest(id="r1", method="tools/call", params={"name": "search"})
        assert parse_message(json.dumps(serialize_message(request))) == request
