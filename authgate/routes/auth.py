"""
Authentication routes for OAuth login.

SECURITY: Tokens returned by the provider go into the session cookie only.
They are never rendered into HTML and never logged.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from authgate.dependencies.auth import (
    get_auth_context,
    get_current_user,
    get_provider,
    get_session_user,
)
from authgate.exceptions import AuthenticationFailedError
from authgate.logging_config import get_logger
from authgate.models.profile import AuthenticatedUser
from authgate.oauth import AuthContext
from authgate.routes.metrics import (
    track_login_completed,
    track_login_failed,
    track_login_started,
    track_logout,
)
from authgate.services.identity_service import IdentityProviderClient
from authgate.templates import render_user

router = APIRouter(tags=["Authentication"])


def establish_session(request: Request, user: AuthenticatedUser) -> None:
    """Write the authenticated profile into the session cookie."""
    request.session.update(user.to_session())
    track_login_completed(user.profile.provider)
    profile = user.profile.model_dump()
    log = get_logger(provider=profile.pop("provider"))
    log.info(
        "user_authenticated",
        **profile,
        expires_at=str(user.credentials.expires_at) if user.credentials.expires_at else None,
        has_refresh_token=bool(user.credentials.refresh_token),
    )


@router.get("/auth/me")
async def get_me(user: AuthenticatedUser = Depends(get_current_user)):
    """Display profile of the current session (never includes tokens)."""
    return {"user": user.profile.model_dump()}


@router.get("/auth/{provider}")
async def begin_auth(
    request: Request,
    idp: IdentityProviderClient = Depends(get_provider),
    user: AuthenticatedUser | None = Depends(get_session_user),
):
    """
    Start or complete login.

    1. A session for this provider already exists: render the user view.
    2. The request carries code/state: try to finish the flow here.
    3. Otherwise redirect to the provider with a fresh state token.
    """
    if user is not None and user.profile.provider == idp.name:
        return HTMLResponse(render_user(user.profile))

    if "code" in request.query_params and "state" in request.query_params:
        try:
            user = await idp.complete(request)
        except AuthenticationFailedError as e:
            get_logger(provider=idp.name).info("inline_completion_failed", reason=e.reason)
        else:
            establish_session(request, user)
            return HTMLResponse(render_user(user.profile))

    track_login_started(idp.name)
    return await idp.begin(request)


@router.get("/auth/callback/{provider}")
async def auth_callback(
    request: Request,
    idp: IdentityProviderClient = Depends(get_provider),
    auth: AuthContext = Depends(get_auth_context),
):
    """
    Handle the provider callback (server-side flow).

    On success the session cookie is written and the browser is sent to the
    frontend. On failure a 401 is returned and the browser has to restart
    from /auth/{provider}.
    """
    try:
        user = await idp.complete(request)
    except AuthenticationFailedError as e:
        track_login_failed(idp.name, e.reason)
        get_logger(provider=idp.name).warning(
            "authentication_failed",
            reason=e.reason,
            detail=e.message,
        )
        raise

    establish_session(request, user)
    return RedirectResponse(url=auth.settings.FRONTEND_URL, status_code=302)


@router.get("/logout/{provider}")
async def logout(request: Request, provider: str):
    """
    Clear the session and go back to the index.

    Idempotent: redirects whether or not a session existed.
    """
    had_session = bool(request.session.get("user"))
    request.session.clear()
    track_logout()
    get_logger(provider=provider).info("user_logged_out", had_session=had_session)
    return RedirectResponse(url="/", status_code=307)
