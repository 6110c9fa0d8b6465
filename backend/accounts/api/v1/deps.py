# accounts/api/v1/deps.py
from fastapi import Header, Request

from accounts.core.security import TokenIssuer
from accounts.core.store import UserStore


def get_store(request: Request) -> UserStore:
    """The user record store injected into the app at construction."""
    return request.app.state.store


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.tokens


async def get_current_user_id(
    request: Request,
    authorization: str | None = Header(default=None),
) -> str:
    """
    FastAPI dependency returning the user ID from a valid bearer token.

    Only the token is checked here; whether the user still exists is left to
    the route.

    Raises:
        MissingToken (401): No "Authorization: Bearer <token>" header
        InvalidOrExpiredToken (403): Bad signature, malformed or expired token

    Usage:
        @router.get("/protected")
        async def protected_route(user_id: str = Depends(get_current_user_id)):
            ...
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()

    return get_token_issuer(request).verify(token)
