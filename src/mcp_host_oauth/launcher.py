# mcp_host_oauth/launcher.py
"""User-agent launchers used to open the authorization URL."""

import webbrowser
from typing import Protocol


class UserAgentLauncher(Protocol):
    """Anything that can show a URL to the user.

    Implementations may raise or return False on failure; the OAuth flow treats
    either as a non-fatal warning.
    """

    def open(self, url: str) -> bool: ...


class WebBrowserLauncher:
    """Opens URLs in the system default browser."""

    def open(self, url: str) -> bool:
        return webbrowser.open(url)


class ManualLauncher:
    """Never opens anything; the user copies the URL from the log."""

    def open(self, url: str) -> bool:
        return False
