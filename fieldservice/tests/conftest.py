from __future__ import annotations

import pytest
from flask import Flask
from flask.testing import FlaskClient

from fieldservice.app import create_app
from fieldservice.app.config import Settings


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        project_name="Field Service Test",
        log_level="DEBUG",
        cors_origins=["http://localhost:5173"],
        telemetry_enabled=True,
        max_upcoming_dates=12,
    )


@pytest.fixture()
def app(settings: Settings) -> Flask:
    return create_app(settings)


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    with app.test_client() as test_client:
        yield test_client
