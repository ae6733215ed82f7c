"""Application configuration via environment variables."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings

from booking_proxy.errors import ConfigurationError

log = logging.getLogger("booking_proxy.config")

CLIENT_LOGIN_MODES = ("email_match", "validate")


class Settings(BaseSettings):
    # Upstream credentials
    mindbody_api_key: str = ""
    mindbody_site_id: str = ""
    mindbody_username: str = ""
    mindbody_password: str = ""
    mindbody_base_url: str = "https://api.mindbodyonline.com/public/v6"

    # Upstream calls
    upstream_timeout_seconds: float = 30.0

    # Site token refresh policy (fixed window, not the token's real lifetime)
    token_ttl_hours: float = 24
    token_refresh_buffer_minutes: float = 5

    # Bookable items pagination
    bookable_items_page_size: int = 100
    bookable_items_max_offset: int = 1000

    # Client accounts
    client_login_mode: str = "email_match"
    client_default_address: str = "Panama"
    client_default_gender: str = "Female"
    client_default_referred_by: str = "Website"

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings, raises on errors."""
        warnings: list[str] = []

        required = {
            "MINDBODY_API_KEY": self.mindbody_api_key,
            "MINDBODY_SITE_ID": self.mindbody_site_id,
            "MINDBODY_USERNAME": self.mindbody_username,
            "MINDBODY_PASSWORD": self.mindbody_password,
        }
        missing = [name for name, value in required.items() if not value.strip()]
        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing)
            )

        if self.client_login_mode not in CLIENT_LOGIN_MODES:
            raise ConfigurationError(
                f"CLIENT_LOGIN_MODE must be one of {', '.join(CLIENT_LOGIN_MODES)}, "
                f"got {self.client_login_mode!r}"
            )

        if self.client_login_mode == "email_match":
            warnings.append(
                "CLIENT_LOGIN_MODE=email_match: client login only checks that the "
                "email exists and does NOT verify the password."
            )

        if self.upstream_timeout_seconds <= 0:
            warnings.append("UPSTREAM_TIMEOUT_SECONDS <= 0; upstream calls will never time out.")

        return warnings


settings = Settings()
