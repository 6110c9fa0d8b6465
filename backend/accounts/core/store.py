"""
User record store.

Routes only talk to the narrow UserStore interface. Records cross it as
plain dicts shaped like the API output:

    {"id", "email", "name", "role", "status", "password", "last_seen"}

TortoiseUserStore is the production implementation on the ``users`` table;
InMemoryUserStore keeps records in a dict and is used by tests.

Any failure below the interface surfaces as StoreError.
"""
from __future__ import annotations

import abc
import datetime as dt
import uuid
from contextlib import contextmanager
from typing import Iterable, Optional

from accounts.core.errors import StoreError
from accounts.models.user import User

STATUS_BLOCKED = "blocked"
STATUS_UNBLOCKED = "unblocked"


def _parse_id(value) -> uuid.UUID:
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError) as exc:
        raise StoreError(f"Invalid user id: {value!r}") from exc


def _parse_ids(values: Iterable) -> list[uuid.UUID]:
    return [_parse_id(v) for v in values]


def _isoformat(value: Optional[dt.datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class UserStore(abc.ABC):
    """Operations the routes need from the user table."""

    @abc.abstractmethod
    async def find_by_email(self, email: str) -> Optional[dict]:
        """Return the first record with exactly this email, or None."""

    @abc.abstractmethod
    async def find_by_id(self, user_id) -> Optional[dict]:
        """Return the record with this id, or None. Malformed ids raise StoreError."""

    @abc.abstractmethod
    async def insert(
        self,
        *,
        email: str,
        name: str,
        role: str,
        status: str,
        password: str,
        last_seen: dt.datetime,
    ) -> dict:
        """Create a record; the store assigns the id."""

    @abc.abstractmethod
    async def update_status(self, user_ids: Iterable, status: str) -> None:
        """Set status on every matching record; unknown ids are ignored."""

    @abc.abstractmethod
    async def delete_by_ids(self, user_ids: Iterable) -> None:
        """Delete every matching record; unknown ids are ignored."""

    @abc.abstractmethod
    async def list_all(self) -> list[dict]:
        """Return every record."""


# ==============================================================================
# Tortoise ORM implementation
# ==============================================================================
def _user_to_dict(u: User) -> dict:
    """
    Convert User model instance to dictionary format for API responses.
    """
    return {
        "id": str(u.id),
        "email": u.email,
        "name": u.name,
        "role": u.role,
        "status": u.status,
        "password": u.password,
        "last_seen": _isoformat(u.last_seen),
    }


@contextmanager
def _translate_errors(operation: str):
    """Re-raise driver/ORM failures as StoreError."""
    try:
        yield
    except StoreError:
        raise
    except Exception as exc:
        raise StoreError(f"{operation} failed: {exc}") from exc


class TortoiseUserStore(UserStore):
    """UserStore backed by the Tortoise ``User`` model (Tortoise must be initialised)."""

    async def find_by_email(self, email):
        with _translate_errors("find_by_email"):
            u = await User.filter(email=email).first()
        return _user_to_dict(u) if u else None

    async def find_by_id(self, user_id):
        pk = _parse_id(user_id)
        with _translate_errors("find_by_id"):
            u = await User.get_or_none(id=pk)
        return _user_to_dict(u) if u else None

    async def insert(self, *, email, name, role, status, password, last_seen):
        with _translate_errors("insert"):
            u = await User.create(
                email=email,
                name=name,
                role=role,
                status=status,
                password=password,
                last_seen=last_seen,
            )
        return _user_to_dict(u)

    async def update_status(self, user_ids, status):
        ids = _parse_ids(user_ids)
        if not ids:
            return
        with _translate_errors("update_status"):
            await User.filter(id__in=ids).update(status=status)

    async def delete_by_ids(self, user_ids):
        ids = _parse_ids(user_ids)
        if not ids:
            return
        with _translate_errors("delete_by_ids"):
            await User.filter(id__in=ids).delete()

    async def list_all(self):
        with _translate_errors("list_all"):
            rows = await User.all()
        return [_user_to_dict(u) for u in rows]


# ==============================================================================
# In-memory implementation
# ==============================================================================
class InMemoryUserStore(UserStore):
    """Dict-backed store with the same observable behaviour as the table."""

    def __init__(self):
        # uuid -> record; insertion order doubles as table order
        self._rows: dict[uuid.UUID, dict] = {}

    async def find_by_email(self, email):
        for row in self._rows.values():
            if row["email"] == email:
                return dict(row)
        return None

    async def find_by_id(self, user_id):
        row = self._rows.get(_parse_id(user_id))
        return dict(row) if row else None

    async def insert(self, *, email, name, role, status, password, last_seen):
        pk = uuid.uuid4()
        row = {
            "id": str(pk),
            "email": email,
            "name": name,
            "role": role,
            "status": status,
            "password": password,
            "last_seen": _isoformat(last_seen),
        }
        self._rows[pk] = row
        return dict(row)

    async def update_status(self, user_ids, status):
        for pk in _parse_ids(user_ids):
            if pk in self._rows:
                self._rows[pk]["status"] = status

    async def delete_by_ids(self, user_ids):
        for pk in _parse_ids(user_ids):
            self._rows.pop(pk, None)

    async def list_all(self):
        return [dict(row) for row in self._rows.values()]
