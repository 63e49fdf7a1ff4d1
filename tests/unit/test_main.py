"""Unit tests for application startup."""

import pytest
from sqlalchemy import func, select

from globalstyles import main
from globalstyles.models import GLOBAL_STYLES_POST_TYPE, Post


@pytest.fixture
def use_test_database(monkeypatch, session_factory):
    monkeypatch.setattr(main, "get_session_factory", lambda: session_factory)


async def count_global_styles(session_factory, theme: str) -> int:
    async with session_factory() as session:
        result = await session.execute(
            select(func.count(Post.id)).where(
                Post.post_type == GLOBAL_STYLES_POST_TYPE, Post.theme == theme
            )
        )
        return result.scalar_one()


class TestBootstrapActiveTheme:
    @pytest.mark.asyncio
    async def test_creates_document_for_active_theme(self, use_test_database, settings, session_factory):
        await main.bootstrap_active_theme(settings)

        assert await count_global_styles(session_factory, "tt1-blocks") == 1

    @pytest.mark.asyncio
    async def test_is_idempotent(self, use_test_database, settings, session_factory):
        await main.bootstrap_active_theme(settings)
        await main.bootstrap_active_theme(settings)

        assert await count_global_styles(session_factory, "tt1-blocks") == 1

    @pytest.mark.asyncio
    async def test_no_active_theme(self, use_test_database, settings, session_factory):
        settings.active_theme = None

        await main.bootstrap_active_theme(settings)

        assert await count_global_styles(session_factory, "tt1-blocks") == 0


def test_create_app_registers_routes(settings):
    app = main.create_app(settings)

    paths = app.openapi()["paths"]

    assert "/api/global-styles/{global_styles_id}" in paths
    assert "/api/global-styles/themes/{stylesheet}" in paths
    assert "/api/global-styles/themes/{stylesheet}/variations" in paths
