"""Shared pytest fixtures for storefront test suites."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Generator
from pathlib import Path
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.config import Settings  # noqa: E402
from app.core.security import generate_access_token  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.db.base import create_tables  # noqa: E402
from app.db.base import get_db_session  # noqa: E402
from app.db.models.user import User  # noqa: E402

API_PREFIX = "/api/v1"
TEST_PASSWORD = "secret123"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        environment="test",
        jwt_secret="test-secret",
        jwt_expires_days=1,
        bcrypt_rounds=4,
        expose_error_stack=False,
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, class_=Session)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(settings: Settings, session_factory: sessionmaker[Session]) -> FastAPI:
    """Fresh application per test, bound to the in-memory database."""
    from app.main import create_app

    application = create_app(settings)

    def override_db_session() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application.dependency_overrides[get_db_session] = override_db_session
    return application


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Provide an API test client for contract suites."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_session: Session, settings: Settings) -> Callable[..., User]:
    def factory(
        *,
        name: str = "Jane Doe",
        email: str = "jane@example.com",
        password: str = TEST_PASSWORD,
        is_admin: bool = False,
    ) -> User:
        user = User(
            name=name,
            email=email,
            password=hash_password(password, rounds=settings.bcrypt_rounds),
            is_admin=is_admin,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return factory


@pytest.fixture
def customer(make_user: Callable[..., User]) -> User:
    return make_user(name="Jane Doe", email="jane@example.com")


@pytest.fixture
def admin(make_user: Callable[..., User]) -> User:
    return make_user(name="Admin", email="admin@example.com", is_admin=True)


@pytest.fixture
def auth_headers(settings: Settings) -> Callable[[User], dict[str, str]]:
    def build(user: User) -> dict[str, str]:
        token = generate_access_token(
            {"id": str(user.id)},
            secret=settings.jwt_secret,
            expires_days=settings.jwt_expires_days,
        )
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def customer_headers(customer: User, auth_headers: Callable[[User], dict[str, str]]) -> dict[str, str]:
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin: User, auth_headers: Callable[[User], dict[str, str]]) -> dict[str, str]:
    return auth_headers(admin)
