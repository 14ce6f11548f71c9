"""Shared fixtures."""

import socket
from typing import Callable

import httpx
import pytest

from mcp_host_oauth.config import HostConfig
from mcp_host_oauth.oauth_config import OAuthConfig


def find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def free_port() -> int:
    """Provide a loopback port that is currently unused."""
    return find_free_port()


@pytest.fixture
def oauth_config():
    """Provide OAuth configuration."""
    return OAuthConfig(
        authorization_url="https://auth.example.com/login/oauth/authorize",
        token_url="https://auth.example.com/login/oauth/access_token",
        client_id="test_client_id",
        client_secret="test_client_secret",
        redirect_uri="http://localhost:8080/callback",
        scope="read:user user:email",
    )


@pytest.fixture
def host_config(oauth_config):
    """Provide host configuration."""
    return HostConfig(oauth=oauth_config, server_url="https://mcp.example.com/")


@pytest.fixture
def make_client():
    """Build an AsyncClient whose requests are answered by ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
