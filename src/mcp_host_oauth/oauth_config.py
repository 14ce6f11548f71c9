# mcp_host_oauth/oauth_config.py
"""OAuth configuration and result models."""

from typing import Optional

from pydantic import BaseModel

DEFAULT_REDIRECT_URI = "http://localhost:8080/callback"


class OAuthConfig(BaseModel):
    """OAuth 2.0 authorization-code configuration for one provider."""

    # OAuth endpoints
    authorization_url: str
    token_url: str

    # Client credentials
    client_id: str
    client_secret: str = ""

    # OAuth parameters
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scope: str = ""

    model_config = {"frozen": True}


class AuthorizationResult(BaseModel):
    """Query parameters captured from the single authorization callback."""

    code: Optional[str] = None
    state: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None

    model_config = {"frozen": True}

    def is_success(self) -> bool:
        return self.error is None and bool(self.code)

    def is_error(self) -> bool:
        return self.error is not None


class OAuthTokens(BaseModel):
    """Bearer token issued by the token endpoint."""

    access_token: str
    token_type: str = "Bearer"
    scope: Optional[str] = None

    model_config = {"frozen": True}

    def get_authorization_header(self) -> str:
        """Get the Authorization header value."""
        # Ensure Bearer is capitalized per RFC 6750
        token_type = (
            self.token_type.capitalize()
            if self.token_type.lower() == "bearer"
            else self.token_type
        )
        return f"{token_type} {self.access_token}"
