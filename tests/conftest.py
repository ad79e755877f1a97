import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import AsyncGenerator, Dict, List, Optional, Tuple

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.main import app
from app.auth.identity import IdentityProvider, get_identity_provider
from app.auth.models import User
from app.auth.schemas import CurrentUser
from app.core.exceptions import StorageError, UnauthorizedError
from app.core.models import AcademicYear, Resource, Subject, SubjectOffering, Unit
from app.core.storage import get_resource_storage
from app.db.session import Base, get_db


class FakeIdentityProvider(IdentityProvider):
    """Maps known tokens to users; records every token it was asked to verify."""

    def __init__(self, users: Dict[str, CurrentUser]) -> None:
        self.users = users
        self.calls: List[str] = []

    async def verify(self, token: str) -> CurrentUser:
        self.calls.append(token)
        user = self.users.get(token)
        if user is None:
            raise UnauthorizedError("Invalid token")
        return user


class FakeStorage:
    """In-memory stand-in for the storage bucket."""

    bucket = "resources"

    def __init__(self) -> None:
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.removed: List[str] = []
        self.signed: List[Tuple[str, int]] = []
        self.fail_upload = False

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        if self.fail_upload:
            raise StorageError("File upload failed: storage unavailable")
        if path in self.objects:
            raise StorageError("File upload failed: The resource already exists")
        self.objects[path] = (data, content_type)

    async def create_signed_url(self, path: str, expires_in: int) -> str:
        self.signed.append((path, expires_in))
        return f"https://storage.test/object/sign/resources/{path}?token=t&expires_in={expires_in}"

    async def remove(self, path: str) -> None:
        self.removed.append(path)
        self.objects.pop(path, None)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture()
async def engine(tmp_path):
    """A fresh SQLite file per test so request sessions and assertion sessions see the same data."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def seed(session_factory) -> SimpleNamespace:
    """Reference data: two subjects, two academic years, three offerings, two units, three users.

    Returns plain ids only, so tests never hold ORM objects across sessions.
    """
    alice_id, bob_id, admin_id, faculty_id = (uuid.uuid4() for _ in range(4))
    async with session_factory() as session:
        session.add_all(
            [
                User(id=alice_id, email="alice@uni.edu", full_name="Alice Student", role="student"),
                User(id=bob_id, email="bob@uni.edu", full_name="Bob Student", role="student"),
                User(id=admin_id, email="admin@uni.edu", full_name="Ada Admin", role="admin"),
                User(id=faculty_id, email="prof@uni.edu", full_name="Prof Faculty", role="faculty"),
            ]
        )
        cs = Subject(code="CS301", name="Operating Systems")
        ee = Subject(code="EE201", name="Circuits")
        ay_2023 = AcademicYear(start_year=2023, end_year=2024)
        ay_2024 = AcademicYear(start_year=2024, end_year=2025)
        session.add_all([cs, ee, ay_2023, ay_2024])
        await session.flush()

        cs_2024 = SubjectOffering(subject_id=cs.id, academic_year_id=ay_2024.id, faculty_id=faculty_id)
        cs_2023 = SubjectOffering(subject_id=cs.id, academic_year_id=ay_2023.id, faculty_id=faculty_id)
        ee_2024 = SubjectOffering(subject_id=ee.id, academic_year_id=ay_2024.id, faculty_id=faculty_id)
        session.add_all([cs_2024, cs_2023, ee_2024])
        await session.flush()

        unit_1 = Unit(subject_offering_id=cs_2024.id, unit_number=1, title="Processes")
        unit_2 = Unit(subject_offering_id=cs_2024.id, unit_number=2, title="Memory")
        session.add_all([unit_1, unit_2])
        await session.flush()

        ids = SimpleNamespace(
            alice_id=alice_id,
            bob_id=bob_id,
            admin_id=admin_id,
            faculty_id=faculty_id,
            cs_id=cs.id,
            ee_id=ee.id,
            ay_2023_id=ay_2023.id,
            ay_2024_id=ay_2024.id,
            cs_2024_id=cs_2024.id,
            cs_2023_id=cs_2023.id,
            ee_2024_id=ee_2024.id,
            unit_1_id=unit_1.id,
            unit_2_id=unit_2.id,
        )
        await session.commit()
    return ids


@pytest.fixture()
def users(seed) -> Dict[str, CurrentUser]:
    return {
        "alice-token": CurrentUser(id=seed.alice_id, email="alice@uni.edu", role="student"),
        "bob-token": CurrentUser(id=seed.bob_id, email="bob@uni.edu", role="student"),
        "admin-token": CurrentUser(id=seed.admin_id, email="admin@uni.edu", role="admin"),
    }


@pytest.fixture()
def identity_provider(users) -> FakeIdentityProvider:
    return FakeIdentityProvider(users)


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
async def client(session_factory, identity_provider, storage) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app with the database and provider collaborators overridden."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[get_resource_storage] = lambda: storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_resource(session_factory, seed):
    """Insert a resource row directly. Defaults to a CS301 2024-2025 link by alice."""

    async def _make(
        title: str = "Scheduling notes",
        *,
        contributor_id: Optional[uuid.UUID] = None,
        kind: str = "external_link",
        resource_type: Optional[str] = "lecture_notes",
        subject_id: Optional[int] = None,
        offering_id: Optional[int] = None,
        unit_id: Optional[int] = None,
        is_deleted: bool = False,
        minutes_ago: int = 0,
    ) -> uuid.UUID:
        resource_id = uuid.uuid4()
        async with session_factory() as session:
            session.add(
                Resource(
                    id=resource_id,
                    title=title,
                    description=f"{title} description",
                    kind=kind,
                    resource_type=resource_type,
                    subject_id=subject_id or seed.cs_id,
                    subject_offering_id=offering_id or seed.cs_2024_id,
                    unit_id=unit_id,
                    storage_path=f"{seed.cs_id}/{seed.cs_2024_id}/1700000000000-{title}.pdf" if kind == "file" else None,
                    external_url="https://example.org/notes" if kind == "external_link" else None,
                    contributor_id=contributor_id or seed.alice_id,
                    is_deleted=is_deleted,
                    created_at=datetime(2025, 1, 1, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago),
                )
            )
            await session.commit()
        return resource_id

    return _make
