import logging
from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://polaris.blackduck.com"


class Settings(BaseSettings):
    POLARIS_BASE_URL: str = DEFAULT_BASE_URL
    POLARIS_API_TOKEN: str | None = None

    POLARIS_PAGE_SIZE: int = 25
    POLARIS_HTTP_TIMEOUT: float = 30.0

    LOG_LEVEL: str = "WARNING"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    def get_log_level(self) -> int:
        """将 LOG_LEVEL 转换为 logging 常量，无法识别时回退到 WARNING"""
        level = logging.getLevelName(self.LOG_LEVEL.strip().upper())
        return level if isinstance(level, int) else logging.WARNING


settings = Settings()


@dataclass(frozen=True)
class PolarisConfig:
    """Per-client configuration: one instance URL, one API token."""

    base_url: str
    api_token: str

