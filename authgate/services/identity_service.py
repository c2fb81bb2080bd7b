"""
Identity provider client.

Thin wrapper around an Authlib Starlette OAuth client: Authlib stores and
checks the anti-forgery state in the session and performs the code exchange;
this service turns the result into an AuthenticatedUser and maps every
failure onto AuthenticationFailedError.
"""
import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.base_client import MismatchingStateError
from starlette.requests import Request
from starlette.responses import RedirectResponse

from authgate.exceptions import AuthenticationFailedError
from authgate.models.profile import AuthenticatedUser

# Authlib prefers httpx2 as its transport when it is installed and falls back
# to httpx; upstream errors may come from either.
TIMEOUT_ERRORS: tuple = (httpx.TimeoutException,)
TRANSPORT_ERRORS: tuple = (httpx.HTTPError,)
try:
    import httpx2
except ImportError:
    pass
else:
    TIMEOUT_ERRORS += (httpx2.TimeoutException,)
    TRANSPORT_ERRORS += (httpx2.HTTPError,)


class IdentityProviderClient:
    """One registered OAuth2 provider (e.g. Google)."""

    def __init__(self, name: str, display_name: str, callback_url: str, client):
        self.name = name
        self.display_name = display_name
        self.callback_url = callback_url
        self.client = client

    async def begin(self, request: Request) -> RedirectResponse:
        """
        Start the authorization-code flow.

        Authlib generates a fresh state token, saves it in the session and
        returns a 302 to the provider's authorization endpoint.
        """
        return await self.client.authorize_redirect(request, self.callback_url)

    async def complete(self, request: Request) -> AuthenticatedUser:
        """
        Finish the flow from the provider's redirect.

        Validates state, exchanges the code and fetches the user profile.

        Raises:
            AuthenticationFailedError: state mismatch, provider error, exchange
                failure, timeout or an unusable profile
        """
        error = request.query_params.get("error")
        if error:
            raise AuthenticationFailedError(
                f"Provider returned error: {error}", reason="provider_error"
            )

        try:
            token = await self.client.authorize_access_token(request)
            userinfo = token.get("userinfo")
            if not userinfo:
                userinfo = await self.client.userinfo(token=token)
            return AuthenticatedUser.from_provider(self.name, dict(userinfo), token)
        except MismatchingStateError as e:
            raise AuthenticationFailedError(
                "State mismatch, restart the login", reason="state_mismatch", original_error=e
            ) from e
        except TIMEOUT_ERRORS as e:
            raise AuthenticationFailedError(
                f"Timed out talking to {self.display_name}", reason="timeout", original_error=e
            ) from e
        except TRANSPORT_ERRORS as e:
            raise AuthenticationFailedError(
                f"Could not reach {self.display_name}: {e.__class__.__name__}",
                reason="upstream_error",
                original_error=e,
            ) from e
        except AuthlibBaseError as e:
            raise AuthenticationFailedError(
                f"OAuth error: {e.error}", reason="oauth_error", original_error=e
            ) from e
        except (KeyError, TypeError, ValueError) as e:
            raise AuthenticationFailedError(
                f"Invalid response from {self.display_name}", reason="invalid_profile", original_error=e
            ) from e
