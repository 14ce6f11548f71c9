#!/usr/bin/env python3
"""
Basic example of an authenticated MCP session.

This example signs in with GitHub using the OAuth 2.0 authorization code flow
and then listens to an MCP server's event stream, answering pings and
printing every other message it receives.

To use it:

1. Register an OAuth app with the callback URL http://localhost:8080/callback
2. Export its credentials:
     export MCP_HOST_CLIENT_ID=...
     export MCP_HOST_CLIENT_SECRET=...
3. Optionally point MCP_HOST_SERVER_URL at your MCP server
"""

import asyncio
import logging
import sys

from mcp_host_oauth import JsonRpcMessage, MCPHost, MCPHostError, load_config, serialize_message


def show_message(message: JsonRpcMessage) -> None:
    print(f"<- {serialize_message(message)}")


async def main():
    config = load_config()
    host = MCPHost(config, callback_timeout=300)

    print(f"Signing in as client {config.oauth.client_id}...")
    print("=" * 60)

    try:
        tokens = await host.authenticate()
        print(f"Authenticated ({len(tokens.access_token)} character token)")

        print(f"Connecting to {config.server_url}")
        count = await host.run(on_message=show_message)
        print(f"Server closed the stream after {count} event(s)")
    except MCPHostError as e:
        print(f"\nError: {e}")
        return 1

    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(asyncio.run(main()))
