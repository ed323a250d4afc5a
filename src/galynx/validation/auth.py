"""Pydantic models for authentication payloads

TokenBundle is frozen: a refresh replaces the whole bundle, it never
edits fields on an existing one.
"""

from pydantic import BaseModel, ConfigDict, Field


class TokenBundle(BaseModel):
    """Access + refresh credential pair with their expirations"""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., min_length=1, description="Bearer token")
    refresh_token: str = Field(..., min_length=1, description="Refresh token")
    access_expires_at: int = Field(
        ..., description="Access token expiry (epoch seconds)"
    )
    refresh_expires_at: int = Field(
        ..., description="Refresh token expiry (epoch seconds)"
    )


class User(BaseModel):
    """Signed-in user profile returned by /me"""

    id: str
    email: str
    name: str
    workspace_id: str
    role: str


class AuthSession(TokenBundle):
    """Login result: the token bundle plus the user it belongs to"""

    user: User

    @classmethod
    def from_parts(cls, tokens: TokenBundle, user: User) -> "AuthSession":
        return cls(**tokens.model_dump(), user=user)
