# mcp_host_oauth/jsonrpc.py
"""JSON-RPC 2.0 envelopes exchanged with the MCP server.

Inbound payloads are classified into exactly one of four variants:

- ``JsonRpcRequest``       has ``method`` and ``id``
- ``JsonRpcNotification``  has ``method`` and no ``id``
- ``JsonRpcResponse``      has ``result``
- ``JsonRpcErrorResponse`` has ``error``

Anything else (wrong ``jsonrpc`` version, both ``result`` and ``error``,
invalid JSON) raises ``MessageParseError``.
"""

import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ValidationError

from .errors import MessageParseError

JSONRPC_VERSION = "2.0"

RequestId = Union[int, str]
Params = Union[Dict[str, Any], List[Any]]


class JsonRpcRequest(BaseModel):
    """Request expecting a response correlated by ``id``."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId
    method: str
    params: Optional[Params] = None

    model_config = {"frozen": True}

    def to_wire(self) -> Dict[str, Any]:
        exclude = {"params"} if self.params is None else None
        return self.model_dump(mode="json", exclude=exclude)


class JsonRpcNotification(BaseModel):
    """One-way message; never answered."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: Optional[Params] = None

    model_config = {"frozen": True}

    def to_wire(self) -> Dict[str, Any]:
        exclude = {"params"} if self.params is None else None
        return self.model_dump(mode="json", exclude=exclude)


class JsonRpcResponse(BaseModel):
    """Successful response."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId
    result: Any

    model_config = {"frozen": True}

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class JsonRpcError(BaseModel):
    """The ``error`` member of an error response."""

    code: int
    message: str
    data: Optional[Any] = None

    model_config = {"frozen": True}


class JsonRpcErrorResponse(BaseModel):
    """Error response; ``id`` is null when the request id was unreadable."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Optional[RequestId] = None
    error: JsonRpcError

    model_config = {"frozen": True}

    def to_wire(self) -> Dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "error": self.error.model_dump(mode="json", exclude_none=True),
        }


JsonRpcMessage = Union[
    JsonRpcRequest, JsonRpcNotification, JsonRpcResponse, JsonRpcErrorResponse
]


def parse_message(data: Union[str, bytes, Dict[str, Any]]) -> JsonRpcMessage:
    """
    Parse one JSON-RPC 2.0 envelope.

    Args:
        data: Raw JSON text (e.g. an SSE event's data) or a decoded object

    Returns:
        The matching message variant

    Raises:
        MessageParseError: If the payload is not a valid JSON-RPC 2.0 envelope
    """
    raw = data.decode("utf-8", "replace") if isinstance(data, bytes) else data

    if isinstance(raw, str):
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MessageParseError(f"invalid JSON: {e}", raw) from e
    else:
        payload = raw
        raw = json.dumps(payload)

    if not isinstance(payload, dict):
        raise MessageParseError("expected a JSON object", raw)

    if payload.get("jsonrpc") != JSONRPC_VERSION:
        raise MessageParseError("'jsonrpc' member must be \"2.0\"", raw)

    has_result = "result" in payload
    has_error = "error" in payload
    if has_result and has_error:
        raise MessageParseError("envelope has both 'result' and 'error'", raw)

    model: type[BaseModel]
    if "method" in payload:
        if has_result or has_error:
            raise MessageParseError("request carries 'result' or 'error'", raw)
        model = JsonRpcRequest if "id" in payload else JsonRpcNotification
    elif has_result:
        model = JsonRpcResponse
    elif has_error:
        model = JsonRpcErrorResponse
    else:
        raise MessageParseError("not a request, response or notification", raw)

    try:
        return model.model_validate(payload)  # type: ignore[return-value]
    except ValidationError as e:
        raise MessageParseError(
            f"invalid {model.__name__}: {e.error_count()} validation error(s)", raw
        ) from e


def serialize_message(message: JsonRpcMessage) -> Dict[str, Any]:
    """Convert a message to its JSON-RPC wire object."""
    return message.to_wire()


def encode_message(message: JsonRpcMessage) -> str:
    """Serialize a message to compact JSON text."""
    return json.dumps(serialize_message(message), separators=(",", ":"))
