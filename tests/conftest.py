"""Shared fixtures.

Repositories and the mailer are replaced by in-memory doubles so the suite
needs neither PostgreSQL nor an SMTP server.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("MAIL_HOST", "")

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from nirapod_auth.api.v1 import deps
from nirapod_auth.core.exceptions import DeliveryError, UserAlreadyExistsException
from nirapod_auth.core.security import create_access_token, hash_password
from nirapod_auth.main import app
from nirapod_auth.services.admin_service import AdminService
from nirapod_auth.services.auth_services import AuthService
from nirapod_auth.services.otp_service import OtpManager
from nirapod_auth.services.user_service import UserService


class InMemoryUserRepository:
    def __init__(self):
        self.users: dict[str, dict] = {}
        self.lock = asyncio.Lock()

    async def get_by_id(self, user_id: str) -> Optional[dict]:
        user = self.users.get(user_id)
        return dict(user) if user else None

    async def get_by_email(self, email: str) -> Optional[dict]:
        return next((dict(u) for u in self.users.values() if u["email"] == email), None)

    async def get_by_phone(self, phone: str) -> Optional[dict]:
        return next((dict(u) for u in self.users.values() if u["phone"] == phone), None)

    async def list_all(self) -> list[dict]:
        return [dict(u) for u in self.users.values()]

    def _check_unique(self, user_id: str, changes: dict) -> None:
        for field in ("email", "phone"):
            if field in changes and any(
                    u[field] == changes[field] and u["id"] != user_id for u in self.users.values()):
                raise UserAlreadyExistsException(field)

    async def create(self, user: dict) -> dict:
        self._check_unique(user["id"], user)
        self.users[user["id"]] = dict(user)
        return dict(user)

    async def update_password(self, user_id: str, hashed_password: str) -> None:
        self.users[user_id]["hashed_password"] = hashed_password

    async def update_profile(self, user_id: str, changes: dict) -> Optional[dict]:
        if user_id not in self.users:
            return None
        self._check_unique(user_id, changes)
        self.users[user_id].update({k: v for k, v in changes.items() if k in ("name", "email", "phone")})
        return dict(self.users[user_id])

    async def promote_to_admin(self, user_id: str) -> Optional[dict]:
        if user_id not in self.users:
            return None
        self.users[user_id].update(is_admin=True, is_verified=True)
        return dict(self.users[user_id])

    async def update_verification(self, user_id: str, approve: bool):
        async with self.lock:
            user = self.users.get(user_id)
            if user is None:
                return None
            was_verified = user["is_verified"]
            # yield between read and write like a real round trip would
            await asyncio.sleep(0)
            user["is_verified"] = approve
            return was_verified, dict(user)


class InMemoryOtpRepository:
    def __init__(self):
        self.codes: dict[str, dict] = {}

    async def upsert(self, email: str, code: str, expires_at: datetime) -> None:
        self.codes[email] = {"email": email, "code": code, "expires_at": expires_at}

    async def get(self, email: str) -> Optional[dict]:
        record = self.codes.get(email)
        await asyncio.sleep(0)
        return dict(record) if record else None

    async def consume(self, email: str, code: str, now: datetime) -> bool:
        record = self.codes.get(email)
        if record is None or record["code"] != code or record["expires_at"] < now:
            return False
        del self.codes[email]
        return True


class RecordingMailer:
    """Collects outgoing mail as ``(kind, email, value)`` tuples."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False
        self.error: Optional[Exception] = None

    async def _record(self, kind: str, email: str, value: str) -> None:
        if self.error is not None:
            raise self.error
        if self.fail:
            raise DeliveryError(f"Could not deliver e-mail to {email}")
        self.sent.append((kind, email, value))

    async def send_otp(self, email: str, code: str) -> None:
        await self._record("otp", email, code)

    async def send_verification_approved(self, email: str, name: str) -> None:
        await self._record("approved", email, name)

    async def send_verification_disapproved(self, email: str, name: str) -> None:
        await self._record("disapproved", email, name)

    def of_kind(self, kind: str) -> list[tuple[str, str, str]]:
        return [m for m in self.sent if m[0] == kind]

    def last_otp(self, email: str) -> str:
        return [m for m in self.sent if m[0] == "otp" and m[1] == email][-1][2]


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_user(name="Rahim Uddin", email="rahim@example.com", phone="01711111111",
              password="secret-pw", is_verified=False, is_admin=False) -> dict:
    return {
        "id": uuid.uuid4().hex,
        "name": name,
        "email": email,
        "phone": phone,
        "hashed_password": hash_password(password),
        "nid_front": "ZnJvbnQ=",
        "nid_back": "YmFjaw==",
        "photo": "https://example.com/rahim.png",
        "is_verified": is_verified,
        "is_admin": is_admin,
        "created_at": datetime.now(timezone.utc),
    }


def bearer(user: dict) -> dict:
    return {"Authorization": "Bearer " + create_access_token(user["email"])}


@pytest.fixture()
def user_repo():
    return InMemoryUserRepository()


@pytest.fixture()
def otp_repo():
    return InMemoryOtpRepository()


@pytest.fixture()
def mailer():
    return RecordingMailer()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def otp_manager(otp_repo, clock):
    return OtpManager(otp_repo, ttl=timedelta(minutes=5), length=6, clock=clock)


@pytest.fixture()
def auth_service(user_repo, otp_manager, mailer):
    return AuthService(user_repo, otp_manager, mailer)


@pytest.fixture()
def admin_service(user_repo, mailer):
    return AdminService(user_repo, mailer)


@pytest.fixture()
def user_service(user_repo):
    return UserService(user_repo)


@pytest.fixture()
def client(user_repo, otp_repo, mailer):
    app.dependency_overrides[deps.get_user_repo] = lambda: user_repo
    app.dependency_overrides[deps.get_otp_repo] = lambda: otp_repo
    app.dependency_overrides[deps.get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()
