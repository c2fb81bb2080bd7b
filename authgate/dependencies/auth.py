"""
Authentication dependencies for FastAPI.

SECURITY: The session cookie is the only evidence of authentication.
Nothing here re-verifies identity with the provider.
"""
from fastapi import Depends, Request

from authgate.exceptions import AuthenticationFailedError
from authgate.models.profile import AuthenticatedUser
from authgate.oauth import AuthContext
from authgate.services.identity_service import IdentityProviderClient


def get_auth_context(request: Request) -> AuthContext:
    """Return the AuthContext built at startup."""
    return request.app.state.auth


def get_provider(
    provider: str,
    auth: AuthContext = Depends(get_auth_context),
) -> IdentityProviderClient:
    """
    Resolve the {provider} path parameter.

    Raises UnsupportedProviderError (404) before any upstream is contacted.
    """
    return auth.get_provider(provider)


def get_session_user(request: Request) -> AuthenticatedUser | None:
    """Authenticated user from the session cookie, or None."""
    return AuthenticatedUser.from_session(request.session)


def get_current_user(
    user: AuthenticatedUser | None = Depends(get_session_user),
) -> AuthenticatedUser:
    """
    Dependency that requires an established session.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            ...
    """
    if user is None:
        raise AuthenticationFailedError("Not authenticated")
    return user
