"""
Pydantic model for application configuration.
Provides validation for all settings and derives the storage locations.
"""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_SERVER_URL = "http://localhost:8088"

if os.name == "nt":
    DEFAULT_ENTRYPOINT_PATTERNS = ["*.exe"]
else:
    DEFAULT_ENTRYPOINT_PATTERNS = ["*.exe", "*.x86_64", "*.AppImage", "*.sh"]


class AppConfig(BaseModel):
    """A validated configuration model for the application."""

    # Remote service
    server_url: str = DEFAULT_SERVER_URL
    api_token: str = ""
    fetch_attempts: int = 3
    request_timeout: int = 60

    # Storage locations
    app_data_path: str = Field(..., repr=False)
    drafts_path: str = ""
    games_path: str = ""

    # Installation
    entrypoint_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENTRYPOINT_PATTERNS)
    )

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    @field_validator("server_url")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        """Ensures the server URL is an absolute http(s) URL."""
        if not v:
            raise ValueError("Server URL cannot be empty.")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Server URL must start with http:// or https://: {v}")
        return v

    @field_validator("fetch_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        """Ensures a reasonable number of download attempts."""
        if v < 1 or v > 10:
            raise ValueError("Fetch attempts must be between 1 and 10.")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Request timeout must be at least 1 second.")
        return v

    @field_validator("entrypoint_patterns")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        """Drops blank patterns and requires at least one to remain."""
        patterns = [p.strip() for p in v if p.strip()]
        if not patterns:
            raise ValueError("At least one entrypoint pattern is required.")
        return patterns

    @model_validator(mode="after")
    def derive_storage_paths(self) -> "AppConfig":
        """Fills in the drafts and games directories below the app data root."""
        if not self.app_data_path:
            raise ValueError("App data path cannot be empty.")
        base = Path(self.app_data_path).expanduser()
        # Assigning through __dict__ avoids re-running validation on assignment.
        if not self.drafts_path:
            self.__dict__["drafts_path"] = str(base / "Drafts")
        if not self.games_path:
            self.__dict__["games_path"] = str(base / "Games")
        return self

    def drafts_root(self) -> Path:
        return Path(self.drafts_path).expanduser()

    def games_root(self) -> Path:
        return Path(self.games_path).expanduser()

    def full_server_url(self) -> str:
        """Returns the server URL without a trailing slash."""
        return self.server_url.rstrip("/")

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"app_data_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
