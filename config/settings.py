"""
Application settings module.

Manages all configuration via environment variables using pydantic-settings.
Invalid optional values fall back to their defaults instead of failing.
"""

import json
from functools import lru_cache
from typing import Annotated, Any
from urllib.parse import urlsplit

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Category name -> location substring (the implicit "all" category is not listed)
DEFAULT_CATEGORIES: dict[str, str] = {
    "koto": "江東区",
    "kamedo": "亀戸",
    "shinagawa": "品川区",
    "minamioi": "南大井",
    "meguro": "目黒区",
    "honcho": "目黒本町",
}


class RedisSettings(BaseSettings):
    """Redis connection settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="REDIS_", extra="ignore")

    url: str = ""  # REDIS_URL, wins over host/port when set
    host: str = "127.0.0.1"
    port: int = 6379
    db: int = 0
    password: str = ""
    scan_count: int = 500

    @property
    def dsn(self) -> str:
        """Generate Redis URL."""
        if self.url:
            return self.url
        if self.password:
            return f"redis://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"

    @property
    def safe_dsn(self) -> str:
        """Redis URL with the password masked, for logging."""
        dsn = self.dsn
        password = urlsplit(dsn).password
        if not password:
            return dsn
        return dsn.replace(f":{password}@", ":***@", 1)


class CrawlerSettings(BaseSettings):
    """Crawler settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CRAWLER_", extra="ignore")

    start_url: str = ""
    max_page: int | None = None  # None or <= 0: all pages
    sample_rate: float = 1.0

    # Sleep `throttle_delay` seconds after every `throttle_window` requests
    throttle_window: int = 10
    throttle_delay: float = 10.0

    timeout: float = 15.0
    quiet: bool = False

    @field_validator("max_page", mode="before")
    @classmethod
    def parse_max_page(cls, v: Any) -> int | None:
        """Treat empty, invalid and non-positive ceilings as unlimited."""
        try:
            value = int(v)
        except (TypeError, ValueError):
            return None
        return value if value > 0 else None

    @field_validator("sample_rate", mode="before")
    @classmethod
    def parse_sample_rate(cls, v: Any) -> float:
        """Sample rate must be within [0, 1], otherwise 1.0."""
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 1.0
        if not 0.0 <= value <= 1.0:
            return 1.0
        return value

    @field_validator("throttle_window", mode="before")
    @classmethod
    def parse_throttle_window(cls, v: Any) -> int:
        """Invalid window falls back to 10 requests."""
        try:
            return int(v)
        except (TypeError, ValueError):
            return 10

    @field_validator("throttle_delay", mode="before")
    @classmethod
    def parse_throttle_delay(cls, v: Any) -> float:
        """Invalid or negative delay falls back to 10 seconds."""
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 10.0
        return value if value >= 0 else 10.0

    @field_validator("quiet", mode="before")
    @classmethod
    def parse_quiet(cls, v: Any) -> bool:
        """Accept 1/true/yes style flags, anything else is False."""
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in ("1", "true", "yes", "on")


class MetricsSettings(BaseSettings):
    """Daily metrics settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="METRICS_", extra="ignore")

    # METRICS_CATEGORIES='{"koto": "江東区"}'
    categories: Annotated[dict[str, str], NoDecode] = dict(DEFAULT_CATEGORIES)

    @field_validator("categories", mode="before")
    @classmethod
    def parse_categories(cls, v: Any) -> dict[str, str]:
        """Fall back to the default table on malformed input."""
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except ValueError:
                return dict(DEFAULT_CATEGORIES)
        if not isinstance(v, dict) or not v:
            return dict(DEFAULT_CATEGORIES)
        if not all(isinstance(k, str) and isinstance(s, str) and s for k, s in v.items()):
            return dict(DEFAULT_CATEGORIES)
        return {k: s for k, s in v.items() if k != "all"} or dict(DEFAULT_CATEGORIES)


class ReportSettings(BaseSettings):
    """Chart and report output settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="REPORT_", extra="ignore")

    graph_dir: str = "graphs"
    trend_days: int = 30


class SmtpSettings(BaseSettings):
    """SMTP settings for the metrics e-mail."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SMTP_", extra="ignore")

    host: str = ""
    port: int = 587
    user: str = ""
    password: str = ""
    sender: str = ""  # SMTP_SENDER, defaults to user
    to: str = ""
    use_tls: bool = True
    timeout: float = 30.0

    @property
    def from_address(self) -> str:
        """Sender address, falling back to the login user."""
        return self.sender or self.user


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    quiet_mode: bool = False  # QUIET_MODE=1

    redis: RedisSettings = RedisSettings()
    crawler: CrawlerSettings = CrawlerSettings()
    metrics: MetricsSettings = MetricsSettings()
    report: ReportSettings = ReportSettings()
    smtp: SmtpSettings = SmtpSettings()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
