"""Server configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


def _default_ui_dir() -> Path:
    return (Path.cwd() / ".." / "apps-sdk-auxee" / "dist").resolve()


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3003

    # Public base URL used for UI content items; derived from request
    # headers when unset.
    mcp_public_url: str | None = None

    # Companion UI bundle mounted at /app
    app_ui_dir: Path = Field(default_factory=_default_ui_dir)

    # Behaviour
    seed_demo_notes: bool = True
    strict_methods: bool = False

    log_level: str = "INFO"

    @property
    def public_url(self) -> str | None:
        """MCP_PUBLIC_URL without trailing slashes, or None."""
        if not self.mcp_public_url:
            return None
        return self.mcp_public_url.rstrip("/")


settings = Settings()
