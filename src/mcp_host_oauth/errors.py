# mcp_host_oauth/errors.py
"""Exception hierarchy for the OAuth flow and the streaming JSON-RPC client.

Every failure of an authorization attempt is terminal for that attempt and is
raised to the caller. Only ``MessageParseError`` is recovered locally by the
stream loop, and ``BrowserLaunchWarning`` is a warning, never an error.
"""

from typing import Optional


class MCPHostError(Exception):
    """Base exception for everything raised by this package."""


class ConfigError(MCPHostError):
    """Raised when host configuration is missing or malformed."""


# ---------------------------------------------------------------------------
# OAuth authorization-code flow
# ---------------------------------------------------------------------------


class OAuthFlowError(MCPHostError):
    """Base exception for authorization-code flow failures."""


class ListenerBindError(OAuthFlowError):
    """Raised when the local redirect listener cannot be bound."""

    def __init__(self, redirect_uri: str, reason: str):
        self.redirect_uri = redirect_uri
        self.reason = reason
        super().__init__(f"Could not listen on {redirect_uri}: {reason}")


class CallbackTimeoutError(OAuthFlowError):
    """Raised when no authorization callback arrives within the timeout."""

    def __init__(self, redirect_uri: str, timeout: float):
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout}s waiting for OAuth callback on {redirect_uri}"
        )


class CallbackError(OAuthFlowError):
    """Raised when the authorization server redirected back with ``error``."""

    def __init__(self, error: str, description: Optional[str] = None):
        self.error = error
        self.description = description
        message = f"OAuth error: {error}"
        if description:
            message = f"{message} ({description})"
        super().__init__(message)


class MissingCodeError(OAuthFlowError):
    """Raised when the callback carried neither ``code`` nor ``error``."""

    def __init__(self) -> None:
        super().__init__("No authorization code received")


class StateMismatchError(OAuthFlowError):
    """Raised when the callback ``state`` differs from the one sent.

    This is treated as a possible CSRF attack; the code is never exchanged.
    """

    def __init__(self, expected: str, received: Optional[str]):
        self.expected = expected
        self.received = received
        super().__init__("State parameter mismatch - possible CSRF attack")


class TokenExchangeError(OAuthFlowError):
    """Raised when exchanging the authorization code for a token fails."""


class TokenExchangeHttpError(TokenExchangeError):
    """Raised when the token endpoint answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Token exchange failed with HTTP {status_code}: {body}")


class TokenParseError(TokenExchangeError):
    """Raised when a 2xx token response carries no usable ``access_token``."""

    def __init__(self, body: str, reason: str = "missing access_token"):
        self.body = body
        self.reason = reason
        super().__init__(f"Failed to parse token response ({reason}): {body}")


# ---------------------------------------------------------------------------
# Streaming / JSON-RPC
# ---------------------------------------------------------------------------


class StreamError(MCPHostError):
    """Base exception for event-stream failures."""


class StreamConnectError(StreamError):
    """Raised when the event stream cannot be opened.

    ``status_code`` is None when no HTTP response was received at all.
    """

    def __init__(self, status_code: Optional[int], body: str = ""):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"Failed to connect to event stream: {body}")
        else:
            super().__init__(f"Failed to connect to event stream: HTTP {status_code}")


class StreamReadError(StreamError):
    """Raised when the connection fails while the stream is being read."""


class RpcSendError(MCPHostError):
    """Raised when a JSON-RPC message cannot be POSTed to the RPC endpoint."""


class MessageParseError(MCPHostError, ValueError):
    """Raised when an event payload is not a valid JSON-RPC 2.0 envelope."""

    def __init__(self, reason: str, data: str = ""):
        self.reason = reason
        self.data = data
        super().__init__(f"Invalid JSON-RPC message: {reason}")


class BrowserLaunchWarning(UserWarning):
    """Emitted when the user agent could not be opened automatically."""
