"""Tests for Settings loading and startup validation."""

import pytest
from fastapi.testclient import TestClient

from booking_proxy.app import create_app
from booking_proxy.config import Settings
from booking_proxy.errors import ConfigurationError

CREDENTIALS = {
    "mindbody_api_key": "k",
    "mindbody_site_id": "-99",
    "mindbody_username": "owner",
    "mindbody_password": "secret",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CREDENTIALS:
        monkeypatch.delenv(name.upper(), raising=False)
    monkeypatch.delenv("CLIENT_LOGIN_MODE", raising=False)
    monkeypatch.delenv("UPSTREAM_TIMEOUT_SECONDS", raising=False)


class TestValidateStartup:
    def test_missing_credentials_listed(self):
        settings = Settings(_env_file=None, mindbody_api_key="k")

        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate_startup()

        message = exc_info.value.message
        assert "MINDBODY_SITE_ID" in message
        assert "MINDBODY_USERNAME" in message
        assert "MINDBODY_PASSWORD" in message
        assert "MINDBODY_API_KEY" not in message

    def test_blank_values_count_as_missing(self):
        settings = Settings(_env_file=None, **{**CREDENTIALS, "mindbody_password": "  "})
        with pytest.raises(ConfigurationError):
            settings.validate_startup()

    def test_email_match_warns(self):
        warnings = Settings(_env_file=None, **CREDENTIALS).validate_startup()
        assert any("does NOT verify the password" in w for w in warnings)

    def test_validate_mode_is_quiet(self):
        settings = Settings(_env_file=None, client_login_mode="validate", **CREDENTIALS)
        assert settings.validate_startup() == []

    def test_unknown_login_mode(self):
        settings = Settings(_env_file=None, client_login_mode="trust_me", **CREDENTIALS)
        with pytest.raises(ConfigurationError):
            settings.validate_startup()

    def test_disabled_timeout_warns(self):
        settings = Settings(
            _env_file=None, client_login_mode="validate",
            upstream_timeout_seconds=0, **CREDENTIALS,
        )
        assert len(settings.validate_startup()) == 1


class TestEnvironment:
    def test_reads_env_vars(self, monkeypatch):
        monkeypatch.setenv("MINDBODY_API_KEY", "from-env")
        monkeypatch.setenv("MINDBODY_SITE_ID", "1234")
        monkeypatch.setenv("BOOKABLE_ITEMS_PAGE_SIZE", "50")
        monkeypatch.setenv("CLIENT_LOGIN_MODE", "validate")

        settings = Settings(_env_file=None)

        assert settings.mindbody_api_key == "from-env"
        assert settings.mindbody_site_id == "1234"
        assert settings.bookable_items_page_size == 50
        assert settings.client_login_mode == "validate"

    def test_defaults(self, monkeypatch):
        for name in ("TOKEN_TTL_HOURS", "BOOKABLE_ITEMS_MAX_OFFSET", "PORT"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.token_ttl_hours == 24
        assert settings.bookable_items_max_offset == 1000
        assert settings.port == 3000


class TestLifespan:
    def test_startup_fails_without_credentials(self):
        app = create_app(settings=Settings(_env_file=None))

        with pytest.raises(ConfigurationError):
            with TestClient(app):
                pass

    def test_startup_builds_and_closes_client(self):
        app = create_app(settings=Settings(_env_file=None, **CREDENTIALS))

        with TestClient(app) as client:
            assert app.state.upstream is not None
            assert client.get("/health").status_code == 200

        assert app.state.upstream is None
