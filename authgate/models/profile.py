"""
Authenticated user profile models.

The profile is split in two so that credentials never reach HTML or logs:
DisplayProfile is safe to render, CredentialProfile only lives in the
session cookie.
"""
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel


class DisplayProfile(BaseModel):
    """Identity fields that are safe to render and log."""
    provider: str
    user_id: str
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    nickname: str = ""
    email: str = ""
    avatar_url: str = ""
    location: str = ""
    description: str = ""


class CredentialProfile(BaseModel):
    """Tokens returned by the provider. Never rendered, never logged."""
    access_token: str = ""
    refresh_token: str = ""
    expires_at: Optional[datetime] = None


class AuthenticatedUser(BaseModel):
    """Normalized user profile produced by a successful callback."""
    profile: DisplayProfile
    credentials: CredentialProfile

    @classmethod
    def from_provider(
        cls,
        provider: str,
        userinfo: dict[str, Any],
        token: dict[str, Any],
    ) -> "AuthenticatedUser":
        """
        Build a normalized profile from an OpenID Connect userinfo document
        and an OAuth2 token response.

        Args:
            provider: Provider name (e.g. "google")
            userinfo: Claims returned by the userinfo endpoint
            token: Token response from the code exchange

        Returns:
            AuthenticatedUser

        Raises:
            ValueError: if the userinfo identifies nobody (no subject, no email)
        """
        user_id = userinfo.get("sub") or userinfo.get("id") or ""
        email = userinfo.get("email") or ""
        if not user_id and not email:
            raise ValueError("userinfo has neither a subject identifier nor an email")
        nickname = userinfo.get("nickname") or userinfo.get("preferred_username") or ""

        expires_at = None
        if token.get("expires_at"):
            expires_at = datetime.fromtimestamp(int(token["expires_at"]), tz=timezone.utc)

        return cls(
            profile=DisplayProfile(
                provider=provider,
                user_id=str(user_id),
                name=userinfo.get("name") or "",
                first_name=userinfo.get("given_name") or "",
                last_name=userinfo.get("family_name") or "",
                nickname=nickname,
                email=email,
                avatar_url=userinfo.get("picture") or "",
                location=userinfo.get("location") or "",
                description=userinfo.get("description") or "",
            ),
            credentials=CredentialProfile(
                access_token=token.get("access_token") or "",
                refresh_token=token.get("refresh_token") or "",
                expires_at=expires_at,
            ),
        )

    def to_session(self) -> dict[str, Any]:
        """Serialize for storage in the session cookie (JSON-safe)."""
        return {
            "user": self.profile.model_dump(mode="json"),
            "credentials": self.credentials.model_dump(mode="json"),
        }

    @classmethod
    def from_session(cls, session: dict[str, Any]) -> Optional["AuthenticatedUser"]:
        """Rebuild from session contents, or None if the session holds no user."""
        user = session.get("user")
        if not user:
            return None
        return cls(
            profile=DisplayProfile(**user),
            credentials=CredentialProfile(**(session.get("credentials") or {})),
        )
