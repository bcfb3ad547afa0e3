"""Shared fixtures: in-memory database, fake Supabase collaborators, HTTP client"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SUPABASE_URL", "https://supabase.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-key")
os.environ["LOCAL_TIMEZONE"] = "UTC"

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID, uuid4

import httpx
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import domain.models  # noqa: F401  (registers tables)
from api.deps import get_auth_client, get_storage_client
from domain.errors import NotAuthenticatedError, NotFoundError, ValidationError
from domain.models import UserProfile, UserRole, Visitor
from infrastructure.database import get_session
from main import app


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def connection_lost(statement: str = "SELECT 1") -> OperationalError:
    return OperationalError(statement, {}, ConnectionResetError("connection reset by peer"))


class FakeAuthClient:
    """In-process stand-in for SupabaseAuthClient"""

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}  # id -> user
        self.passwords: Dict[str, str] = {}  # email -> password
        self.tokens: Dict[str, str] = {}  # token -> user id
        self.deleted = []

    def add_user(self, email: str, password: str = "secret123", token: str = None) -> Dict[str, Any]:
        user = {"id": str(uuid4()), "email": email, "user_metadata": {}}
        self.users[user["id"]] = user
        self.passwords[email] = password
        if token:
            self.tokens[token] = user["id"]
        return user

    async def sign_in_with_password(self, email, password):
        if self.passwords.get(email) != password:
            raise NotAuthenticatedError("Credenciales inválidas")
        user = next(u for u in self.users.values() if u["email"] == email)
        token = f"token-{user['id']}"
        self.tokens[token] = user["id"]
        return {
            "access_token": token,
            "refresh_token": "refresh",
            "expires_in": 3600,
            "token_type": "bearer",
            "user": user,
        }

    async def get_user(self, access_token):
        user_id = self.tokens.get(access_token)
        if user_id is None:
            raise NotAuthenticatedError()
        return self.users[user_id]

    async def sign_out(self, access_token):
        self.tokens.pop(access_token, None)

    async def admin_create_user(self, email, password, full_name=None):
        if email in self.passwords:
            raise ValidationError("Error al crear usuario: already registered")
        user = self.add_user(email, password)
        user["user_metadata"] = {"full_name": full_name or ""}
        return user

    async def admin_get_user(self, user_id):
        if user_id not in self.users:
            raise NotFoundError("Usuario no encontrado")
        return self.users[user_id]

    async def admin_delete_user(self, user_id):
        user = self.users.pop(user_id, None)
        if user is None:
            raise NotFoundError("Usuario no encontrado")
        self.passwords.pop(user["email"], None)
        self.deleted.append(user_id)


class FakeStorageClient:
    def __init__(self):
        self.uploads = []

    async def upload(self, data, path, content_type="application/octet-stream", bucket=None, upsert=True):
        self.uploads.append({"path": path, "size": len(data), "content_type": content_type})
        return f"https://supabase.test/storage/v1/object/public/{bucket or 'visitor-photos'}/{path}"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def fake_auth():
    return FakeAuthClient()


@pytest.fixture
def fake_storage():
    return FakeStorageClient()


@pytest.fixture
async def client(session_maker, fake_auth, fake_storage):
    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_auth_client] = lambda: fake_auth
    app.dependency_overrides[get_storage_client] = lambda: fake_storage

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()


async def add_back_office_user(session_maker, fake_auth, email, role, token):
    user = fake_auth.add_user(email, token=token)
    async with session_maker() as session:
        user_id = UUID(user["id"])
        session.add(UserProfile(id=user_id, full_name=email.split("@")[0]))
        if role:
            session.add(UserRole(user_id=user_id, role=role))
        await session.commit()
    return user


@pytest.fixture
async def admin_headers(session_maker, fake_auth):
    await add_back_office_user(session_maker, fake_auth, "guardia@example.com", "admin", "admin-token")
    return {"Authorization": "Bearer admin-token"}


@pytest.fixture
async def super_admin_headers(session_maker, fake_auth):
    await add_back_office_user(session_maker, fake_auth, "jefe@example.com", "super_admin", "super-token")
    return {"Authorization": "Bearer super-token"}


@pytest.fixture
def make_visitor(session_maker):
    async def _make(**overrides) -> Visitor:
        data = {
            "id_number": "12345",
            "full_name": "María González",
            "company": "Acme",
            "authorization_expiry": utc_today() + timedelta(days=7),
            "authorized": True,
        }
        data.update(overrides)
        visitor = Visitor(**data)
        async with session_maker() as session:
            session.add(visitor)
            await session.commit()
            await session.refresh(visitor)
        return visitor

    return _make
