from __future__ import annotations

import pytest
from dependency_injector import providers

from src.main import app as module_app
from src.main.app import create_app
from src.main.container import get_container


class _StubMongoDatabase:
    async def create_indexes(self) -> None:
        pass

    def close(self) -> None:
        pass


@pytest.mark.asyncio
async def test_create_app_initializes_lifespan() -> None:
    app = create_app()
    get_container().mongo_database.override(providers.Object(_StubMongoDatabase()))

    assert app.title == "Lice Forecast Service"
    paths = {route.path for route in app.routes}
    assert "/predictions/generate" in paths
    assert "/risk-scores/{population_id}" in paths
    assert "/scheduler/status" in paths

    async with app.router.lifespan_context(app):
        assert app.state.started_at is not None
        assert app.state.settings.service.title == app.title
        assert app.state.container is get_container()
        assert app.state.container.forecast_scheduler().armed is True

    assert isinstance(module_app.app, type(app))
