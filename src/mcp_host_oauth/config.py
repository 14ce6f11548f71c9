# mcp_host_oauth/config.py
"""Host configuration loading.

Settings come from an optional JSON file shaped like::

    {
        "GitHub": {"ClientId": "...", "ClientSecret": "...", "McpServerUrl": "..."},
        "OAuth": {"CallbackUrl": "http://localhost:8080/callback", "Scope": "read:user"}
    }

and are overridden by ``MCP_HOST_*`` environment variables.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from .errors import ConfigError
from .oauth_config import DEFAULT_REDIRECT_URI, OAuthConfig

logger = logging.getLogger(__name__)

GITHUB_AUTHORIZATION_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
DEFAULT_SCOPE = "read:user user:email"
DEFAULT_SERVER_URL = "https://api.githubcopilot.com/mcp/"

ENV_PREFIX = "MCP_HOST_"

# env suffix -> (settings section, settings key)
_SETTINGS_KEYS = {
    "CLIENT_ID": ("GitHub", "ClientId"),
    "CLIENT_SECRET": ("GitHub", "ClientSecret"),
    "SERVER_URL": ("GitHub", "McpServerUrl"),
    "AUTH_URL": ("GitHub", "AuthUrl"),
    "TOKEN_URL": ("GitHub", "TokenUrl"),
    "REDIRECT_URI": ("OAuth", "CallbackUrl"),
    "SCOPE": ("OAuth", "Scope"),
}


class HostConfig(BaseModel):
    """Everything the host needs: OAuth settings plus the MCP server URL."""

    oauth: OAuthConfig
    server_url: str = DEFAULT_SERVER_URL

    model_config = {"frozen": True}


def _read_settings_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Settings file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Settings file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")
    return data


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> HostConfig:
    """
    Build a HostConfig from a settings file and environment overrides.

    Args:
        path: Optional JSON settings file
        environ: Environment mapping (default: ``os.environ``)

    Returns:
        Validated host configuration

    Raises:
        ConfigError: If the file is unreadable or no client id is configured
    """
    env = os.environ if environ is None else environ
    settings = _read_settings_file(Path(path)) if path else {}

    values: Dict[str, str] = {}
    for env_suffix, (section, key) in _SETTINGS_KEYS.items():
        section_data = settings.get(section) or {}
        value = env.get(ENV_PREFIX + env_suffix) or section_data.get(key)
        if value:
            values[env_suffix] = str(value)

    if not values.get("CLIENT_ID"):
        raise ConfigError(
            f"Client ID is required: set GitHub.ClientId in the settings file "
            f"or {ENV_PREFIX}CLIENT_ID"
        )

    try:
        oauth = OAuthConfig(
            authorization_url=values.get("AUTH_URL", GITHUB_AUTHORIZATION_URL),
            token_url=values.get("TOKEN_URL", GITHUB_TOKEN_URL),
            client_id=values["CLIENT_ID"],
            client_secret=values.get("CLIENT_SECRET", ""),
            redirect_uri=values.get("REDIRECT_URI", DEFAULT_REDIRECT_URI),
            scope=values.get("SCOPE", DEFAULT_SCOPE),
        )
        config = HostConfig(
            oauth=oauth, server_url=values.get("SERVER_URL", DEFAULT_SERVER_URL)
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug(f"Loaded configuration for client {oauth.client_id}")
    return config
