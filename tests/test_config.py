"""Tests for configuration loading."""

import json

import pytest

from mcp_host_oauth.config import (
    DEFAULT_SCOPE,
    DEFAULT_SERVER_URL,
    GITHUB_AUTHORIZATION_URL,
    GITHUB_TOKEN_URL,
    load_config,
)
from mcp_host_oauth.errors import ConfigError
from mcp_host_oauth.oauth_config import DEFAULT_REDIRECT_URI, OAuthConfig, OAuthTokens


@pytest.fixture
def settings_file(tmp_path):
    """Write an appsettings.json and return its path."""

    def write(data):
        path = tmp_path / "appsettings.json"
        path.write_text(json.dumps(data) if not isinstance(data, str) else data)
        return path

    return write


class TestLoadConfig:
    """Test load_config."""

    def test_defaults_from_environment(self):
        """Test a client id alone yields GitHub defaults."""
        config = load_config(environ={"MCP_HOST_CLIENT_ID": "cid"})

        assert config.oauth.client_id == "cid"
        assert config.oauth.client_secret == ""
        assert config.oauth.authorization_url == GITHUB_AUTHORIZATION_URL
        assert config.oauth.token_url == GITHUB_TOKEN_URL
        assert config.oauth.redirect_uri == DEFAULT_REDIRECT_URI
        assert config.oauth.scope == DEFAULT_SCOPE
        assert config.server_url == DEFAULT_SERVER_URL

    def test_settings_file(self, settings_file):
        """Test values are read from the GitHub and OAuth sections."""
        path = settings_file(
            {
                "GitHub": {
                    "ClientId": "file-id",
                    "ClientSecret": "file-secret",
                    "McpServerUrl": "https://mcp.example.com/",
                },
                "OAuth": {
                    "CallbackUrl": "http://localhost:9000/cb",
                    "Scope": "repo",
                },
            }
        )

        config = load_config(path, environ={})

        assert config.oauth.client_id == "file-id"
        assert config.oauth.client_secret == "file-secret"
        assert config.oauth.redirect_uri == "http://localhost:9000/cb"
        assert config.oauth.scope == "repo"
        assert config.server_url == "https://mcp.example.com/"

    def test_environment_overrides_file(self, settings_file):
        """Test MCP_HOST_* variables win over the file."""
        path = settings_file({"GitHub": {"ClientId": "file-id", "ClientSecret": "s"}})

        config = load_config(
            str(path),
            environ={
                "MCP_HOST_CLIENT_ID": "env-id",
                "MCP_HOST_AUTH_URL": "https://idp.example.com/authorize",
                "MCP_HOST_TOKEN_URL": "https://idp.example.com/token",
            },
        )

        assert config.oauth.client_id == "env-id"
        assert config.oauth.client_secret == "s"
        assert config.oauth.authorization_url == "https://idp.example.com/authorize"
        assert config.oauth.token_url == "https://idp.example.com/token"

    def test_missing_client_id(self, settings_file):
        """Test a client id is required."""
        path = settings_file({"GitHub": {"ClientSecret": "s"}})
        with pytest.raises(ConfigError, match="Client ID is required"):
            load_config(path, environ={})

    def test_missing_file(self, tmp_path):
        """Test a nonexistent settings file."""
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.json", environ={})

    def test_invalid_json(self, settings_file):
        """Test a settings file that is not JSON."""
        with pytest.raises(ConfigError, match="not valid JSON"):
            load_config(settings_file("{oops"), environ={})

    def test_not_an_object(self, settings_file):
        """Test a settings file that is not a JSON object."""
        with pytest.raises(ConfigError, match="JSON object"):
            load_config(settings_file([1, 2]), environ={})

    def test_config_is_frozen(self):
        """Test loaded configuration cannot be mutated."""
        config = load_config(environ={"MCP_HOST_CLIENT_ID": "cid"})
        with pytest.raises(Exception):
            config.server_url = "https://other.example.com"


class TestModels:
    """Test OAuth models."""

    def test_oauth_config_defaults(self):
        """Test optional fields."""
        config = OAuthConfig(
            authorization_url="https://a.example.com",
            token_url="https://t.example.com",
            client_id="cid",
        )
        assert config.client_secret == ""
        assert config.redirect_uri == DEFAULT_REDIRECT_URI
        assert config.scope == ""

    def test_authorization_header_capitalizes_bearer(self):
        """Test lowercase bearer is normalized."""
        tokens = OAuthTokens(access_token="tok", token_type="bearer")
        assert tokens.get_authorization_header() == "Bearer tok"

    def test_authorization_header_other_type(self):
        """Test non-bearer token types are kept."""
        tokens = OAuthTokens(access_token="tok", token_type="MAC")
        assert tokens.get_authorization_header() == "MAC tok"
