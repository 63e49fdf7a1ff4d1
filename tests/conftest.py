"""
Pytest fixtures for Global Styles API testing.

This module provides:
1. Settings and theme directory fixtures
2. Database fixtures (in-memory SQLite with SQLAlchemy async)
3. User/authentication fixtures
4. Application and HTTP client fixtures
"""

import json
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from globalstyles.config import Settings, get_settings
from globalstyles.core.auth import hash_api_key
from globalstyles.core.database import get_db, reset_db_state
from globalstyles.models import GLOBAL_STYLES_POST_TYPE, Base, Post, User, UserRoleName

FIXTURES_DIR = Path(__file__).parent / "fixtures"

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ==================== SESSION FIXTURES ====================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Reset cached settings and database state around the test run."""
    get_settings.cache_clear()
    reset_db_state()

    yield

    get_settings.cache_clear()
    reset_db_state()


# ==================== SETTINGS & THEMES ====================


@pytest.fixture
def themes_root(tmp_path) -> Path:
    """Themes directory seeded with the fixture themes."""
    root = tmp_path / "themes"
    shutil.copytree(FIXTURES_DIR / "themes", root)
    return root


@pytest.fixture
def make_theme(themes_root):
    """
    Factory that installs a theme under the themes root.

    Usage:
        make_theme("subdir/mytheme", theme_json={...}, variations={"dark": {...}})
    """

    def _make_theme(
        stylesheet: str,
        theme_json: dict | None = None,
        style_css: str | None = None,
        variations: dict[str, dict | str] | None = None,
    ) -> Path:
        path = themes_root.joinpath(*stylesheet.split("/"))
        path.mkdir(parents=True, exist_ok=True)
        (path / "theme.json").write_text(
            json.dumps(theme_json if theme_json is not None else {"version": 2}),
            encoding="utf-8",
        )
        if style_css is not None:
            (path / "style.css").write_text(style_css, encoding="utf-8")
        if variations:
            (path / "styles").mkdir(exist_ok=True)
            for name, data in variations.items():
                content = data if isinstance(data, str) else json.dumps(data)
                (path / "styles" / f"{name}.json").write_text(content, encoding="utf-8")
        return path

    return _make_theme


@pytest.fixture
def settings(themes_root) -> Settings:
    return Settings(
        environment="testing",
        database_url=TEST_DATABASE_URL,
        themes_root=themes_root,
        active_theme="tt1-blocks",
        public_url="http://testserver",
        multisite=False,
    )


# ==================== DATABASE FIXTURES ====================


@pytest_asyncio.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    In-memory SQLite engine with the schema created.

    StaticPool keeps the single in-memory database alive across sessions.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session, rolled back after the test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# ==================== DATA FIXTURES ====================


@dataclass
class ApiUser:
    """A persisted user together with its plaintext API key."""

    id: int | None
    api_key: str | None
    role: str | None = None
    headers: dict[str, str] = field(default_factory=dict)


async def _create_user(
    session_factory,
    email: str,
    role: str,
    api_key: str,
    is_super_admin: bool = False,
) -> ApiUser:
    async with session_factory() as session:
        user = User(
            email=email,
            name=email.split("@")[0],
            role=role,
            is_super_admin=is_super_admin,
            api_key_hash=hash_api_key(api_key),
        )
        session.add(user)
        await session.commit()
        return ApiUser(
            id=user.id,
            api_key=api_key,
            role=role,
            headers={"Authorization": f"Bearer {api_key}"},
        )


@pytest_asyncio.fixture
async def admin_user(session_factory) -> ApiUser:
    return await _create_user(
        session_factory, "admin@example.com", UserRoleName.ADMINISTRATOR, "admin-key"
    )


@pytest_asyncio.fixture
async def editor_user(session_factory) -> ApiUser:
    return await _create_user(
        session_factory, "editor@example.com", UserRoleName.EDITOR, "editor-key"
    )


@pytest_asyncio.fixture
async def subscriber_user(session_factory) -> ApiUser:
    return await _create_user(
        session_factory, "subscriber@example.com", UserRoleName.SUBSCRIBER, "subscriber-key"
    )


@pytest_asyncio.fixture
async def super_admin_user(session_factory) -> ApiUser:
    return await _create_user(
        session_factory,
        "network@example.com",
        UserRoleName.ADMINISTRATOR,
        "super-admin-key",
        is_super_admin=True,
    )


@pytest.fixture
def anonymous_user() -> ApiUser:
    return ApiUser(id=None, api_key=None)


@pytest_asyncio.fixture
async def global_styles_id(session_factory) -> int:
    """User global styles document of the tt1-blocks theme."""
    async with session_factory() as session:
        post = Post(
            post_type=GLOBAL_STYLES_POST_TYPE,
            name="wp-global-styles-tt1-blocks",
            title="Custom Styles",
            content=json.dumps({"version": 2, "isGlobalStylesUserThemeJSON": True}),
            status="publish",
            theme="tt1-blocks",
        )
        session.add(post)
        await session.commit()
        return post.id


@pytest_asyncio.fixture
async def post_id(session_factory) -> int:
    """An ordinary post, not a global styles document."""
    async with session_factory() as session:
        post = Post(post_type="post", title="Hello world", content="<p>Hello</p>")
        session.add(post)
        await session.commit()
        return post.id


# ==================== APPLICATION FIXTURES ====================


@pytest.fixture
def app(settings, session_factory):
    """Application wired to the test database and settings."""
    from globalstyles.main import create_app

    application = create_app(settings)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_settings] = lambda: settings
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


# ==================== MARKERS ====================


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external services required)")
    config.addinivalue_line("markers", "e2e: End-to-end tests through the HTTP application")
