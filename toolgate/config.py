from functools import lru_cache
from urllib.parse import urlparse

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    # App
    APP_NAME: str = "ToolGate"
    SERVICE_NAME: str = "toolgate-backend"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Listener
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    DIST_DIR: str = "dist"

    # Upstream LLM API
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_TIMEOUT_MS: int = 45000

    # Upstream market data REST source
    JAMAICA_API_BASE_URL: str = "https://chaseashley876.pythonanywhere.com"
    JAMAICA_API_TIMEOUT_MS: int = 20000

    # Edge policy
    ALLOWED_ORIGINS: str = ""
    REQUEST_BODY_LIMIT_BYTES: int = 1024 * 1024
    RATE_LIMIT_WINDOW_MS: int = 60000
    RATE_LIMIT_MAX_REQUESTS: int = 120

    # Gateway client
    MCP_TIMEOUT_MS: int = 15000
    PUBLIC_ORIGIN: str = "http://localhost:3000"
    MCP_PROXY_BASE_URL: str = ""

    # Settings store
    DATABASE_URL: str = "sqlite+aiosqlite:///./toolgate.db"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator(
        "OPENROUTER_API_KEY",
        "OPENROUTER_BASE_URL",
        "JAMAICA_API_BASE_URL",
        "PUBLIC_ORIGIN",
        "MCP_PROXY_BASE_URL",
    )
    @classmethod
    def strip_value(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @property
    def allowed_origins(self) -> set[str]:
        """Explicitly configured browser origins, empty when unset."""
        return {item.strip() for item in self.ALLOWED_ORIGINS.split(",") if item.strip()}

    @property
    def openrouter_timeout_seconds(self) -> float:
        return self.OPENROUTER_TIMEOUT_MS / 1000.0

    @property
    def jamaica_timeout_seconds(self) -> float:
        return self.JAMAICA_API_TIMEOUT_MS / 1000.0

    @property
    def mcp_timeout_seconds(self) -> float:
        return self.MCP_TIMEOUT_MS / 1000.0


def _require_http_url(name: str, value: str) -> None:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"{name} must be an http:// or https:// URL, got '{value}'")


def check_settings(settings: Settings) -> Settings:
    """Fail fast on configuration the edge service cannot run without.

    Args:
        settings: Loaded settings.

    Returns:
        The same settings when valid.

    Raises:
        ConfigurationError: If a credential is missing or a URL is malformed.
    """
    if not settings.OPENROUTER_API_KEY:
        raise ConfigurationError("Missing OPENROUTER_API_KEY. Refusing to start.")
    _require_http_url("OPENROUTER_BASE_URL", settings.OPENROUTER_BASE_URL)
    _require_http_url("JAMAICA_API_BASE_URL", settings.JAMAICA_API_BASE_URL)
    if settings.REQUEST_BODY_LIMIT_BYTES <= 0:
        raise ConfigurationError("REQUEST_BODY_LIMIT_BYTES must be positive")
    if settings.RATE_LIMIT_WINDOW_MS <= 0 or settings.RATE_LIMIT_MAX_REQUESTS <= 0:
        raise ConfigurationError("Rate limit window and max requests must be positive")
    return settings


@lru_cache()
def get_settings() -> Settings:
    return Settings()
