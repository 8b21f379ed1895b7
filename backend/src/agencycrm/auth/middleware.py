"""Bearer token extraction and request-scoped identity context."""

from starlette.requests import Request

from agencycrm.auth.types import TokenClaims

BEARER_PREFIX = "Bearer "


def extract_bearer_token(auth_header: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header.

    Returns:
        The token, or None if the header is missing or malformed
    """
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        return None
    token = auth_header[len(BEARER_PREFIX):].strip()
    return token or None


def set_user_context(request: Request, claims: TokenClaims) -> None:
    request.state.user_context = claims


def get_user_context(request: Request) -> TokenClaims | None:
    """Get the claims attached by ``require_auth``.

    Returns:
        TokenClaims if authenticated, None otherwise
    """
    return getattr(request.state, "user_context", None)
