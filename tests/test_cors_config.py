"""
Tests for CORS Configuration (defibuddy/config/cors_config.py)
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from defibuddy.config.cors_config import (
    DEFAULT_DEV_ORIGINS,
    get_cors_origins,
    is_production,
    setup_cors,
)


def make_app():
    app = FastAPI()

    @app.get("/ping")
    def ping():
        return {"ok": True}

    return app


class TestGetCorsOrigins:

    def test_returns_defaults_when_no_env(self, monkeypatch):
        monkeypatch.delenv("CORS_ORIGINS", raising=False)
        assert get_cors_origins() == DEFAULT_DEV_ORIGINS

    def test_parses_env_var(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", " https://defibuddy.app , https://www.defibuddy.app ,")
        assert get_cors_origins() == ["https://defibuddy.app", "https://www.defibuddy.app"]


class TestIsProduction:

    @pytest.mark.parametrize("env,expected", [
        ("production", True),
        ("prod", True),
        ("development", False),
        ("test", False),
    ])
    def test_environment(self, monkeypatch, env, expected):
        monkeypatch.setenv("ENVIRONMENT", env)
        assert is_production() is expected


class TestSetupCors:

    def test_wildcard_rejected_in_production(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("CORS_ORIGINS", "*")
        with pytest.raises(ValueError, match="Wildcard"):
            setup_cors(make_app())

    def test_malformed_origin_rejected_in_production(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("CORS_ORIGINS", "defibuddy.app")
        with pytest.raises(ValueError, match="Invalid origin format"):
            setup_cors(make_app())

    def test_allowed_origin_gets_headers(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.setenv("CORS_ORIGINS", "https://defibuddy.app")
        app = make_app()
        setup_cors(app)

        response = TestClient(app).get("/ping", headers={"Origin": "https://defibuddy.app"})

        assert response.headers["access-control-allow-origin"] == "https://defibuddy.app"
        assert "X-Request-ID" in response.headers["access-control-expose-headers"]

    def test_unknown_origin_gets_no_headers(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.setenv("CORS_ORIGINS", "https://defibuddy.app")
        app = make_app()
        setup_cors(app)

        response = TestClient(app).get("/ping", headers={"Origin": "https://evil.example"})

        assert "access-control-allow-origin" not in response.headers
