"""
User persistence.

One store object is created when the app starts (see ``main.lifespan``) and
handed to request handlers through ``get_store``. Supabase is used when it is
configured; otherwise users live in process memory and vanish on restart.
"""
from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

import httpx
from fastapi import Request
from loguru import logger

from ..schemas import NewUser, User, UserStats


class StoreError(Exception):
    pass

class DuplicateUserError(StoreError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserStore(ABC):
    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, new_user: NewUser) -> User:
        raise NotImplementedError

    @abstractmethod
    async def save(self, user: User) -> User:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        raise NotImplementedError

    async def close(self) -> None:
        pass


class InMemoryUserStore(UserStore):
    """Development store. Returns copies, so changes need an explicit save()."""

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._ids_by_email: Dict[str, str] = {}
        self._next_id = itertools.count(1)

    async def get_by_email(self, email: str) -> Optional[User]:
        uid = self._ids_by_email.get(email.lower())
        return await self.get_by_id(uid) if uid else None

    async def get_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(str(user_id))
        return user.model_copy(deep=True) if user else None

    async def create(self, new_user: NewUser) -> User:
        email = new_user.email.lower()
        if email in self._ids_by_email:
            raise DuplicateUserError(email)
        now = _now()
        user = User(
            **new_user.model_dump(exclude={"email"}),
            email=email,
            id=str(next(self._next_id)),
            created_at=now,
            last_login=now,
        )
        self._users[user.id] = user
        self._ids_by_email[email] = user.id
        return user.model_copy(deep=True)

    async def save(self, user: User) -> User:
        if user.id not in self._users:
            raise StoreError(f"unknown user id {user.id}")
        self._users[user.id] = user.model_copy(deep=True)
        return user

    async def delete(self, user_id: str) -> bool:
        user = self._users.pop(str(user_id), None)
        if user is None:
            return False
        self._ids_by_email.pop(user.email, None)
        return True


class SupabaseUserStore(UserStore):
    """Users table over Supabase REST (service role). `stats` is a jsonb column."""

    def __init__(self, url: str, service_key: str, table: str = "users",
                 client: Optional[httpx.AsyncClient] = None):
        self._rest = f"{url.rstrip('/')}/rest/v1/{table}"
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.AsyncClient(timeout=15)

    def _check(self, r: httpx.Response, op: str) -> None:
        if r.status_code >= 300:
            logger.warning(f"[store] {op} failed: {r.status_code} {r.text}")
            raise StoreError(f"Supabase {op} failed: {r.status_code}")

    async def _one(self, **filters) -> Optional[User]:
        params = {k: f"eq.{v}" for k, v in filters.items()}
        params.update({"select": "*", "limit": "1"})
        r = await self._client.get(self._rest, headers=self._headers, params=params)
        self._check(r, "select")
        rows = r.json()
        return User.model_validate(rows[0]) if rows else None

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._one(email=email.lower())

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return await self._one(id=user_id)

    async def create(self, new_user: NewUser) -> User:
        now = _now().isoformat()
        body = {
            **new_user.model_dump(),
            "email": new_user.email.lower(),
            "created_at": now,
            "last_login": now,
            "stats": UserStats().model_dump(mode="json"),
        }
        r = await self._client.post(
            self._rest,
            headers={**self._headers, "Prefer": "return=representation"},
            json=body,
        )
        if r.status_code == 409:
            raise DuplicateUserError(body["email"])
        self._check(r, "insert")
        return User.model_validate(r.json()[0])

    async def save(self, user: User) -> User:
        r = await self._client.patch(
            self._rest,
            headers={**self._headers, "Prefer": "return=minimal"},
            params={"id": f"eq.{user.id}"},
            json=user.model_dump(mode="json", exclude={"id"}),
        )
        self._check(r, "update")
        return user

    async def delete(self, user_id: str) -> bool:
        r = await self._client.delete(
            self._rest,
            headers={**self._headers, "Prefer": "return=representation"},
            params={"id": f"eq.{user_id}"},
        )
        self._check(r, "delete")
        return bool(r.json())

    async def close(self) -> None:
        await self._client.aclose()


def build_store(settings) -> UserStore:
    if settings.SUPABASE_URL and settings.SUPABASE_SERVICE_ROLE_KEY:
        logger.info(f"[store] using Supabase table {settings.SUPABASE_USERS_TABLE!r}")
        return SupabaseUserStore(
            settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY, settings.SUPABASE_USERS_TABLE,
        )
    logger.warning("[store] no Supabase configured; using in-memory user storage")
    return InMemoryUserStore()


def get_store(request: Request) -> UserStore:
    return request.app.state.store
