#!/usr/bin/env python3
"""
Command line host for OAuth-protected MCP servers.

This tool makes it easy to:
- Authenticate with an OAuth provider (authorization code flow)
- Print the authorization URL without opening a browser
- Connect to an MCP server's event stream and watch its messages

Usage:
    mcp-host auth [--config appsettings.json]
    mcp-host url [--config appsettings.json] [--state STATE]
    mcp-host connect [--config appsettings.json] [--timeout SECONDS]
"""

import argparse
import asyncio
import getpass
import logging
import sys
from typing import Optional

from .config import HostConfig, load_config
from .errors import ConfigError, MCPHostError
from .host import MCPHost
from .jsonrpc import JsonRpcMessage, serialize_message
from .launcher import ManualLauncher, UserAgentLauncher, WebBrowserLauncher
from .oauth_flow import build_authorization_url, generate_state


def safe_display_token(token: str, prefix_len: int = 20, suffix_len: int = 6) -> str:
    """Safely display a token with most characters redacted."""
    if len(token) <= prefix_len + suffix_len:
        return f"{token[:10]}..."

    prefix = token[:prefix_len]
    suffix = token[-suffix_len:]
    redacted_len = len(token) - prefix_len - suffix_len

    return f"{prefix}...{'*' * min(redacted_len, 20)}...{suffix}"


def print_header(text: str):
    """Print a formatted header."""
    print("\n" + "=" * 60)
    print(text)
    print("=" * 60)


def resolve_config(config_path: Optional[str]) -> HostConfig:
    """Load configuration, prompting for the client secret if it is missing."""
    config = load_config(config_path)
    if config.oauth.client_secret:
        return config

    print("Client secret is not configured.")
    secret = getpass.getpass("Enter your client secret: ").strip()
    if not secret:
        raise ConfigError("Client ID and secret are required")
    oauth = config.oauth.model_copy(update={"client_secret": secret})
    return config.model_copy(update={"oauth": oauth})


def _launcher(no_browser: bool) -> UserAgentLauncher:
    return ManualLauncher() if no_browser else WebBrowserLauncher()


async def cmd_auth(
    config: HostConfig,
    state: Optional[str] = None,
    timeout: Optional[float] = None,
    no_browser: bool = False,
) -> int:
    """Run the OAuth flow and show the issued token."""
    print_header("MCP OAuth Setup")
    print(f"Using Client ID: {config.oauth.client_id}")
    print(f"Listening for callback on {config.oauth.redirect_uri}")

    host = MCPHost(config, launcher=_launcher(no_browser), callback_timeout=timeout)

    try:
        tokens = await host.authenticate(state)
    except MCPHostError as e:
        print(f"\n❌ Authentication failed: {e}")
        return 1

    print("\n✅ Authentication successful!")
    print(f"Access Token: {safe_display_token(tokens.access_token)}")
    print(f"Token Type: {tokens.token_type}")
    print(f"Token length: {len(tokens.access_token)} characters")
    if tokens.scope:
        print(f"Scopes: {tokens.scope}")

    return 0


def cmd_url(config: HostConfig, state: Optional[str] = None) -> int:
    """Print the authorization URL (no network access)."""
    url = build_authorization_url(config.oauth, state or generate_state())
    print(url)
    return 0


async def cmd_connect(
    config: HostConfig,
    state: Optional[str] = None,
    timeout: Optional[float] = None,
    no_browser: bool = False,
) -> int:
    """Authenticate, then listen to the MCP server's event stream."""
    print_header("Connecting to MCP Server")
    print(f"Server URL: {config.server_url}")

    host = MCPHost(config, launcher=_launcher(no_browser), callback_timeout=timeout)

    def show_message(message: JsonRpcMessage) -> None:
        print(f"📨 Received MCP message: {serialize_message(message)}")

    try:
        tokens = await host.authenticate(state)
        print(f"✅ Authenticated: {safe_display_token(tokens.access_token)}")
        print("📡 Listening for SSE events... (Ctrl+C to disconnect)")

        count = await host.run(on_message=show_message)
    except MCPHostError as e:
        print(f"\n❌ Error: {e}")
        return 1

    print(f"\n✅ Stream closed by server after {count} event(s)")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="MCP host with OAuth authentication",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration is read from --config (appsettings.json layout) and
MCP_HOST_* environment variables, e.g.:

  MCP_HOST_CLIENT_ID=Iv1.abc mcp-host auth
  mcp-host connect --config appsettings.json --timeout 300
  mcp-host url --state my-state
        """,
    )
    parser.add_argument("--config", help="JSON settings file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    def add_config_option(sub: argparse.ArgumentParser) -> None:
        # Accepted after the command too; SUPPRESS keeps a value given before it
        sub.add_argument(
            "--config", default=argparse.SUPPRESS, help="JSON settings file"
        )

    def add_flow_options(sub: argparse.ArgumentParser) -> None:
        add_config_option(sub)
        sub.add_argument("--state", help="CSRF state value (default: random)")
        sub.add_argument(
            "--timeout",
            type=float,
            help="Seconds to wait for the OAuth callback (default: wait forever)",
        )
        sub.add_argument(
            "--no-browser",
            action="store_true",
            help="Do not open a browser; print the URL instead",
        )

    auth_parser = subparsers.add_parser("auth", help="Run the OAuth flow")
    add_flow_options(auth_parser)

    connect_parser = subparsers.add_parser(
        "connect", help="Authenticate and listen to the MCP event stream"
    )
    add_flow_options(connect_parser)

    url_parser = subparsers.add_parser("url", help="Print the authorization URL")
    add_config_option(url_parser)
    url_parser.add_argument("--state", help="CSRF state value (default: random)")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "url":
            return cmd_url(load_config(args.config), args.state)

        config = resolve_config(args.config)
        if args.command == "auth":
            return asyncio.run(
                cmd_auth(config, args.state, args.timeout, args.no_browser)
            )
        elif args.command == "connect":
            return asyncio.run(
                cmd_connect(config, args.state, args.timeout, args.no_browser)
            )
        else:  # pragma: no cover
            # This should never be reached due to argparse validation
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\n\n❌ Interrupted by user")
        return 130
    except MCPHostError as e:
        print(f"\n❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
