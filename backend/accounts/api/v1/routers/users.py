# accounts/api/v1/routers/users.py
import datetime as dt
import logging

from fastapi import APIRouter, Depends, status

from accounts.api.v1.deps import get_current_user_id, get_store, get_token_issuer
from accounts.core.errors import ApiError, StoreError
from accounts.core.security import TokenIssuer, hash_password, verify_password
from accounts.core.store import STATUS_BLOCKED, STATUS_UNBLOCKED, UserStore
from accounts.schemas.users import EmailIn, LoginIn, RegisterIn, UserIdsIn

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/users", tags=["users"])


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _require_user_ids(body: UserIdsIn) -> list:
    if not isinstance(body.userIds, list):
        raise ApiError(status.HTTP_400_BAD_REQUEST, "User IDs must be provided as an array")
    return body.userIds


async def _lookup_unblocked(store: UserStore, email: str | None) -> dict:
    """Shared body of check-email and check-current-user."""
    user = await store.find_by_email(email) if email else None
    if not user:
        raise ApiError(status.HTTP_404_NOT_FOUND, "User not found")
    if user["status"] == STATUS_BLOCKED:
        raise ApiError(status.HTTP_403_FORBIDDEN, "User is blocked")
    return user


# ==============================================================================
# Public routes
# ==============================================================================
@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn, store: UserStore = Depends(get_store)):
    """
    Register a new user account.

    The email must not belong to an existing user. The existence check and
    the insert are two separate store calls, so two concurrent registrations
    with the same email can both succeed.

    Returns:
        201 {"user": record}; the record carries the bcrypt hash, never the
        plain password.

    Errors:
        400: Missing field, or email already registered
        500: Store failure
    """
    logger.info("POST /api/users/register request received email=%s", body.email)
    if not all((body.email, body.name, body.role, body.status, body.password)):
        raise ApiError(status.HTTP_400_BAD_REQUEST, "All fields are required")

    if await store.find_by_email(body.email):
        raise ApiError(status.HTTP_400_BAD_REQUEST, "User with this email already exists")

    user = await store.insert(
        email=body.email,
        name=body.name,
        role=body.role,
        status=body.status,
        password=hash_password(body.password),
        last_seen=utc_now(),
    )
    return {"user": user}


@router.post("/login")
async def login(
    body: LoginIn,
    store: UserStore = Depends(get_store),
    tokens: TokenIssuer = Depends(get_token_issuer),
):
    """
    Authenticate by email and password and issue a one hour access token.

    Errors:
        400: Missing email or password
        404: No user with this email
        403: User is blocked (checked before the password)
        401: Password does not match
    """
    logger.info("POST /api/users/login request received email=%s", body.email)
    if not body.email or not body.password:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Email and password are required")

    user = await store.find_by_email(body.email)
    if not user:
        raise ApiError(status.HTTP_404_NOT_FOUND, "User not found")
    if user["status"] == STATUS_BLOCKED:
        raise ApiError(status.HTTP_403_FORBIDDEN, "User is blocked")
    if not verify_password(body.password, user["password"]):
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Invalid password")

    return {"token": tokens.issue(user["id"]), "user": user}


@router.post("/check-email")
async def check_email(body: EmailIn | None = None, store: UserStore = Depends(get_store)):
    """Look up a non-blocked user by email (404 if absent, 403 if blocked)."""
    return {"user": await _lookup_unblocked(store, body.email if body else None)}


# ==============================================================================
# Authenticated routes
# ==============================================================================
@router.get("/me")
async def me(
    user_id: str = Depends(get_current_user_id),
    store: UserStore = Depends(get_store),
):
    """Return the user the bearer token was issued for."""
    user = await store.find_by_id(user_id)
    if not user:
        raise ApiError(status.HTTP_404_NOT_FOUND, "User not found")
    return {"user": user}


@router.post("/check-current-user", dependencies=[Depends(get_current_user_id)])
async def check_current_user(body: EmailIn | None = None, store: UserStore = Depends(get_store)):
    """Same lookup as /check-email, behind the token gate."""
    return {"user": await _lookup_unblocked(store, body.email if body else None)}


@router.post("/block", dependencies=[Depends(get_current_user_id)])
async def block_users(body: UserIdsIn, store: UserStore = Depends(get_store)):
    logger.info("POST /api/users/block request received userIds=%s", body.userIds)
    user_ids = _require_user_ids(body)
    await store.update_status(user_ids, STATUS_BLOCKED)
    return {"userIds": user_ids}


@router.post("/unblock", dependencies=[Depends(get_current_user_id)])
async def unblock_users(body: UserIdsIn, store: UserStore = Depends(get_store)):
    logger.info("POST /api/users/unblock request received userIds=%s", body.userIds)
    user_ids = _require_user_ids(body)
    await store.update_status(user_ids, STATUS_UNBLOCKED)
    return {"userIds": user_ids}


@router.post("/delete", dependencies=[Depends(get_current_user_id)])
async def delete_users(body: UserIdsIn, store: UserStore = Depends(get_store)):
    logger.info("POST /api/users/delete request received userIds=%s", body.userIds)
    user_ids = _require_user_ids(body)
    await store.delete_by_ids(user_ids)
    return {"userIds": user_ids}


@router.get("", dependencies=[Depends(get_current_user_id)])
async def list_users(store: UserStore = Depends(get_store)):
    return {"users": await store.list_all()}


@router.get("/{user_id}", dependencies=[Depends(get_current_user_id)])
async def get_user(user_id: str, store: UserStore = Depends(get_store)):
    """
    Fetch one user by id.

    A missing row is reported as a store failure (500), not as 404, unlike
    /me and the email lookups.
    """
    user = await store.find_by_id(user_id)
    if not user:
        raise StoreError(f"No user row for id {user_id}")
    return {"user": user}
