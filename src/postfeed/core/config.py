"""Application configuration via environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_API_URL = "https://post-api-tagm.onrender.com/api/facebook/posts"
DEFAULT_PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/600x400?text=Image+Failed"


class Settings(BaseSettings):
    model_config = {"env_prefix": "POSTFEED_", "env_file": ".env", "extra": "ignore"}

    # Remote post collection
    api_url: str = DEFAULT_API_URL
    request_timeout: float = 30.0

    # Sent with new posts when set; the server still owns the final value
    author: str = ""

    # Display
    placeholder_image_url: str = Field(
        default=DEFAULT_PLACEHOLDER_IMAGE_URL,
        description="Shown in place of image URLs that cannot be displayed",
    )

    # Paths
    data_dir: Path = Path("./data")

    # Logging
    log_level: str = "INFO"

    @property
    def app_log_path(self) -> Path:
        return self.data_dir / "logs" / "app.log"

    @property
    def audit_log_path(self) -> Path:
        return self.data_dir / "logs" / "audit.jsonl"

    @property
    def history_path(self) -> Path:
        return self.data_dir / "logs" / ".feed_history"


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
