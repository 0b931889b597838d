"""Application settings and configuration.

This module defines all configuration options for the archive renderer.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Chan Archive", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Link construction
    base_url: str = Field(default="/", alias="BASE_URL")
    controller_method: str = Field(default="thread", alias="CONTROLLER_METHOD")
    remote_board_base: str = Field(
        default="//boards.4chan.org",
        alias="REMOTE_BOARD_BASE",
    )
    autolink_new_tab: bool = Field(default=True, alias="AUTOLINK_NEW_TAB")

    # Base64-encoded salt mixed into secure tripcodes
    secure_tripcode_salt: str = Field(
        default="",
        alias="SECURE_TRIPCODE_SALT",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def remote_board_root(self) -> str:
        """Return the remote board base without a trailing slash."""
        return self.remote_board_base.rstrip("/")


settings = Settings()
