# mcp_host_oauth/callback_receiver.py
"""One-shot local HTTP receiver for the OAuth redirect."""

import asyncio
import html
import logging
import threading
import time
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Optional
from urllib.parse import parse_qs, urlparse

from .errors import CallbackTimeoutError, ListenerBindError
from .oauth_config import AuthorizationResult

logger = logging.getLogger(__name__)

# How often the worker thread wakes up to check for timeout or shutdown.
POLL_INTERVAL = 0.25

# Longest time one connection may take to send its request line and headers.
REQUEST_TIMEOUT = 5.0

SUCCESS_PAGE = (
    "<html><body><h1>Authorization Successful!</h1>"
    "<p>You can close this window and return to the application.</p>"
    "</body></html>"
)
ERROR_PAGE = (
    "<html><body><h1>OAuth Error</h1><p>Error: {error}</p>"
    "<p>You can close this window.</p></body></html>"
)
MISSING_CODE_PAGE = (
    "<html><body><h1>OAuth Error</h1><p>No authorization code received.</p>"
    "<p>You can close this window.</p></body></html>"
)


def render_callback_page(result: AuthorizationResult) -> tuple[int, str]:
    """Pick the status code and HTML body returned to the browser."""
    if result.error:
        return 400, ERROR_PAGE.format(error=html.escape(result.error))
    if result.code:
        return 200, SUCCESS_PAGE
    return 400, MISSING_CODE_PAGE


def _normalize_path(path: str) -> str:
    return path.rstrip("/") or "/"


class _CallbackServer(HTTPServer):
    """HTTPServer that records the first request made on the callback path."""

    def __init__(self, address, callback_path: str, log: logging.Logger):
        self.callback_path = callback_path
        self.log = log
        self.result: Optional[AuthorizationResult] = None
        self.request_timeout = REQUEST_TIMEOUT
        super().__init__(address, _CallbackHandler)


class _CallbackHandler(BaseHTTPRequestHandler):
    server: _CallbackServer

    def setup(self) -> None:
        # Bounds how long an idle connection (browser preconnect, port scan)
        # can hold the single-threaded receiver
        self.timeout = self.server.request_timeout
        super().setup()

    def do_GET(self) -> None:  # noqa: N802
        parsed = urlparse(self.path)

        if self.server.result is not None or (
            _normalize_path(parsed.path) != self.server.callback_path
        ):
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return

        query_params = parse_qs(parsed.query)

        def get_single_param(key: str) -> Optional[str]:
            values = query_params.get(key, [])
            return values[0] if values else None

        result = AuthorizationResult(
            code=get_single_param("code"),
            state=get_single_param("state"),
            error=get_single_param("error"),
            error_description=get_single_param("error_description"),
        )

        status, page = render_callback_page(result)
        body = page.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

        self.server.result = result

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        self.server.log.debug(f"Callback server: {format % args}")


class CallbackReceiver:
    """
    Single-use listener on the redirect address.

    Binding happens on entry and the socket is released on exit whatever
    happens in between, so use it as a context manager. ``async with`` releases
    the socket off the event loop::

        async with CallbackReceiver("http://localhost:8080/callback") as receiver:
            result = await receiver.receive()

    Only the first request on the redirect path is consumed. Requests on other
    paths (e.g. ``/favicon.ico``) are answered with 404 and ignored.
    """

    def __init__(
        self,
        redirect_uri: str,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the receiver without binding.

        Args:
            redirect_uri: Redirect URI registered with the authorization server
            timeout: Seconds to wait for the callback (None waits forever)
            logger: Logger to use (default: module logger)
        """
        parsed = urlparse(redirect_uri)
        if parsed.scheme != "http" or not parsed.hostname:
            raise ValueError(f"Redirect URI must be a local http:// URL: {redirect_uri}")

        self.host = parsed.hostname
        self.port = parsed.port if parsed.port is not None else 80
        self.callback_path = _normalize_path(parsed.path)
        self.timeout = timeout
        self.log = logger or logging.getLogger(__name__)

        self._redirect_uri = redirect_uri
        self._server: Optional[_CallbackServer] = None
        self._stop = threading.Event()
        self._worker_idle = threading.Event()
        self._worker_idle.set()
        self._consumed = False

    @property
    def redirect_uri(self) -> str:
        """Redirect URI actually being served (resolves port 0 once bound)."""
        if self._server is None:
            return self._redirect_uri
        port = self._server.server_address[1]
        return f"http://{self.host}:{port}{self.callback_path}"

    def __enter__(self) -> "CallbackReceiver":
        if self._server is not None or self._consumed:
            raise RuntimeError("CallbackReceiver is single-use")
        try:
            self._server = _CallbackServer(
                (self.host, self.port), self.callback_path, self.log
            )
        except OSError as e:
            raise ListenerBindError(self._redirect_uri, str(e)) from e
        self._server.timeout = POLL_INTERVAL
        self.log.info(f"Listening for callback on {self.redirect_uri}")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def __aenter__(self) -> "CallbackReceiver":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        # close() may wait on the worker thread; keep that off the event loop
        await asyncio.to_thread(self.close)

    def close(self) -> None:
        """Release the listener. Safe to call more than once."""
        server = self._server
        if server is None:
            return
        self._stop.set()
        # Let a worker still inside handle_request() notice the stop flag
        self._worker_idle.wait(POLL_INTERVAL * 4)
        server.server_close()
        self._server = None
        self._consumed = True
        self.log.debug(f"Callback listener on {self._redirect_uri} closed")

    def _serve_until_callback(self) -> Optional[AuthorizationResult]:
        server = self._server
        assert server is not None
        deadline = None if self.timeout is None else time.monotonic() + self.timeout

        self._worker_idle.clear()
        try:
            while server.result is None:
                if self._stop.is_set():
                    return None
                if deadline is None:
                    server.timeout = POLL_INTERVAL
                    server.request_timeout = REQUEST_TIMEOUT
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise CallbackTimeoutError(self._redirect_uri, self.timeout or 0)
                    server.timeout = min(POLL_INTERVAL, remaining)
                    server.request_timeout = min(REQUEST_TIMEOUT, remaining)
                server.handle_request()
            return server.result
        finally:
            self._worker_idle.set()

    async def receive(self) -> AuthorizationResult:
        """
        Wait for the one authorization callback.

        Returns:
            Captured code/state/error parameters

        Raises:
            CallbackTimeoutError: If a timeout was set and elapsed
            RuntimeError: If the receiver is not bound or already used
        """
        if self._server is None:
            raise RuntimeError("CallbackReceiver is not listening")
        if self._server.result is not None:
            raise RuntimeError("CallbackReceiver already received its callback")

        result = await asyncio.to_thread(self._serve_until_callback)
        if result is None:
            raise RuntimeError("CallbackReceiver was closed while waiting")

        self.log.debug(
            f"Callback received (code={'yes' if result.code else 'no'}, "
            f"error={result.error})"
        )
        return result


async def listen(
    redirect_uri: str,
    timeout: Optional[float] = None,
    logger: Optional[logging.Logger] = None,
) -> AuthorizationResult:
    """Bind, wait for exactly one callback, and release the listener."""
    async with CallbackReceiver(
        redirect_uri, timeout=timeout, logger=logger
    ) as receiver:
        return await receiver.receive()
