"""
OAuth provider registration and session policy.

SECURITY: This module handles OAuth configuration. Credentials and the
session secret come from the environment only; a missing value stops the
application before it can serve traffic.
"""
from dataclasses import dataclass
from urllib.parse import urlparse

import structlog
from authlib.integrations.starlette_client import OAuth

from authgate.config import Settings
from authgate.exceptions import ConfigurationError, UnsupportedProviderError
from authgate.services.identity_service import IdentityProviderClient

logger = structlog.get_logger()

# Session cookie lifetime: 30 days
SESSION_MAX_AGE = 86400 * 30


@dataclass(frozen=True)
class ProviderConfig:
    """Credentials and endpoints for one identity provider."""
    name: str
    display_name: str
    client_id: str
    client_secret: str
    callback_url: str
    authorize_url: str
    access_token_url: str
    userinfo_url: str
    scope: str
    # Extra server metadata handed to Authlib (issuer, jwks_uri, ...)
    metadata: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class SessionPolicy:
    """Fixed policy for the signed session cookie."""
    secret_key: str
    cookie_name: str = "session"
    max_age: int = SESSION_MAX_AGE
    path: str = "/"
    http_only: bool = True
    secure: bool = False
    same_site: str = "lax"


@dataclass(frozen=True)
class AuthContext:
    """
    Everything the auth handlers need, built once at startup.

    Stored on app.state.auth and injected into handlers; there is no
    module-level registry.
    """
    settings: Settings
    session_policy: SessionPolicy
    oauth: OAuth
    providers: dict[str, IdentityProviderClient]

    @property
    def provider_names(self) -> list[str]:
        return sorted(self.providers)

    def get_provider(self, name: str) -> IdentityProviderClient:
        """
        Look up a registered provider by its path name.

        Raises:
            UnsupportedProviderError: if no provider is registered under name
        """
        try:
            return self.providers[name]
        except KeyError:
            raise UnsupportedProviderError(name) from None


def _require(value, name: str) -> str:
    if value is None or not str(value).strip():
        raise ConfigurationError(f"{name} must be set")
    return str(value).strip()


def _require_url(value: str, name: str) -> str:
    parsed = urlparse(value or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"{name} must be an absolute http(s) URL, got {value!r}")
    return value.rstrip("/")


def callback_url_for(settings: Settings, provider: str) -> str:
    """Build the OAuth redirect URI for a provider."""
    base = _require_url(settings.CALLBACK_BASE_URL, "CALLBACK_BASE_URL")
    return f"{base}/auth/callback/{provider}"


def google_provider(settings: Settings) -> ProviderConfig:
    """Google provider configuration from GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET."""
    return ProviderConfig(
        name="google",
        display_name="Google",
        client_id=_require(settings.GOOGLE_CLIENT_ID, "GOOGLE_CLIENT_ID"),
        client_secret=_require(settings.GOOGLE_CLIENT_SECRET, "GOOGLE_CLIENT_SECRET"),
        callback_url=callback_url_for(settings, "google"),
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        access_token_url="https://oauth2.googleapis.com/token",
        userinfo_url="https://openidconnect.googleapis.com/v1/userinfo",
        scope="openid email profile",
        metadata=(
            ("issuer", "https://accounts.google.com"),
            ("jwks_uri", "https://www.googleapis.com/oauth2/v3/certs"),
        ),
    )


def build_session_policy(settings: Settings) -> SessionPolicy:
    """Session cookie policy: 30 days, path /, HTTP-only, Secure in production."""
    return SessionPolicy(
        secret_key=_require(settings.SESSION_SECRET_KEY, "SESSION_SECRET_KEY"),
        cookie_name=settings.SESSION_COOKIE_NAME,
        secure=settings.IS_PRODUCTION,
    )


def register_provider(oauth: OAuth, config: ProviderConfig, timeout: float) -> IdentityProviderClient:
    """Register a provider with the Authlib registry and wrap the client."""
    if not config.client_id or not config.client_secret:
        raise ConfigurationError(f"Provider {config.name!r} is missing client credentials")

    client = oauth.register(
        name=config.name,
        client_id=config.client_id,
        client_secret=config.client_secret,
        authorize_url=config.authorize_url,
        access_token_url=config.access_token_url,
        userinfo_endpoint=config.userinfo_url,
        client_kwargs={
            'scope': config.scope,
            'timeout': timeout,
        },
        **dict(config.metadata),
    )
    return IdentityProviderClient(
        name=config.name,
        display_name=config.display_name,
        callback_url=config.callback_url,
        client=client,
    )


def initialize_auth(
    settings: Settings,
    providers: list[ProviderConfig] | None = None,
) -> AuthContext:
    """
    Validate configuration and build the AuthContext.

    Args:
        settings: Application settings
        providers: Providers to register (default: Google from settings)

    Returns:
        AuthContext with a fresh OAuth registry

    Raises:
        ConfigurationError: if credentials, the session secret or a URL is invalid
    """
    session_policy = build_session_policy(settings)
    _require_url(settings.FRONTEND_URL, "FRONTEND_URL")

    if providers is None:
        providers = [google_provider(settings)]
    if not providers:
        raise ConfigurationError("At least one identity provider must be configured")

    oauth = OAuth()
    registered = {}
    for config in providers:
        if config.name in registered:
            raise ConfigurationError(f"Provider {config.name!r} registered twice")
        registered[config.name] = register_provider(
            oauth, config, timeout=settings.OAUTH_TIMEOUT_SECONDS
        )

    logger.info(
        "auth_initialized",
        providers=sorted(registered),
        secure_cookie=session_policy.secure,
        session_max_age=session_policy.max_age,
    )

    return AuthContext(
        settings=settings,
        session_policy=session_policy,
        oauth=oauth,
        providers=registered,
    )
