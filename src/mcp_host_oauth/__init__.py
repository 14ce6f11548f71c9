"""MCP Host OAuth - OAuth 2.0 authorization code flow plus an SSE JSON-RPC client.

This library connects a host application to a remote MCP server:
- Authorization Code Flow with a one-shot local redirect receiver
- Authorization code to bearer token exchange
- Server-Sent Events stream parsing into JSON-RPC 2.0 messages
- Outbound JSON-RPC over HTTP POST, with automatic ping replies
"""

from .callback_receiver import CallbackReceiver, listen
from .config import HostConfig, load_config
from .dispatcher import DispatchResult, RequestDispatcher
from .errors import (
    BrowserLaunchWarning,
    CallbackError,
    CallbackTimeoutError,
    ConfigError,
    ListenerBindError,
    MCPHostError,
    MessageParseError,
    MissingCodeError,
    OAuthFlowError,
    RpcSendError,
    StateMismatchError,
    StreamConnectError,
    StreamError,
    StreamReadError,
    TokenExchangeError,
    TokenExchangeHttpError,
    TokenParseError,
)
from .host import MCPHost
from .jsonrpc import (
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcMessage,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    parse_message,
    serialize_message,
)
from .launcher import ManualLauncher, UserAgentLauncher, WebBrowserLauncher
from .oauth_config import AuthorizationResult, OAuthConfig, OAuthTokens
from .oauth_flow import FlowState, OAuthFlow, build_authorization_url
from .router import MessageRouter
from .sse import SseDecoder, SseEvent, aiter_sse_events, parse_sse_events, parse_sse_json
from .streaming_client import StreamingProtocolClient
from .token_exchange import TokenExchangeClient

__version__ = "0.1.0"

__all__ = [
    "aiter_sse_events",
    "AuthorizationResult",
    "BrowserLaunchWarning",
    "build_authorization_url",
    "CallbackError",
    "CallbackReceiver",
    "CallbackTimeoutError",
    "ConfigError",
    "DispatchResult",
    "FlowState",
    "HostConfig",
    "JsonRpcError",
    "JsonRpcErrorResponse",
    "JsonRpcMessage",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "listen",
    "ListenerBindError",
    "load_config",
    "ManualLauncher",
    "MCPHost",
    "MCPHostError",
    "MessageParseError",
    "MessageRouter",
    "MissingCodeError",
    "OAuthConfig",
    "OAuthFlow",
    "OAuthFlowError",
    "OAuthTokens",
    "parse_message",
    "parse_sse_events",
    "parse_sse_json",
    "RequestDispatcher",
    "RpcSendError",
    "serialize_message",
    "SseDecoder",
    "SseEvent",
    "StateMismatchError",
    "StreamConnectError",
    "StreamError",
    "StreamingProtocolClient",
    "StreamReadError",
    "TokenExchangeClient",
    "TokenExchangeError",
    "TokenExchangeHttpError",
    "TokenParseError",
    "UserAgentLauncher",
    "WebBrowserLauncher",
]
