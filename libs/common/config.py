import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from sqlalchemy.engine import make_url

DEFAULT_PROPERTIES_FILE = "application.properties"
_PROPERTY_LINE = re.compile(r"^(?P<key>[^=:\s]+)\s*[=:]\s*(?P<value>.*)$")


def property_key_to_field(key: str) -> str:
    """Map ``db.pool.maxLifetime`` style keys to ``DB_POOL_MAX_LIFETIME``."""
    snake = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", key.strip())
    return snake.replace(".", "_").replace("-", "_").upper()


def read_properties(path: Path) -> dict[str, str]:
    """Parse a ``key=value`` properties file, skipping comments and blanks."""
    values: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        match = _PROPERTY_LINE.match(line)
        if match:
            values[match.group("key")] = match.group("value")
    return values


class PropertiesFileSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by a Java-style ``application.properties`` file."""

    def __init__(self, settings_cls: type[BaseSettings], path: Optional[Path] = None):
        super().__init__(settings_cls)
        self.path = path or Path(
            os.environ.get("APP_PROPERTIES_FILE", DEFAULT_PROPERTIES_FILE)
        )
        self._values = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        return {
            property_key_to_field(key): value
            for key, value in read_properties(self.path).items()
        }

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        return self._values.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for field_name in self.settings_cls.model_fields:
            value = self._values.get(field_name)
            if value is not None:
                data[field_name] = value
        return data


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    SERVICE_NAME: str = "shop"

    # Server
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8080

    # Database
    DB_DRIVER: Optional[str] = None
    DB_URL: str = "postgresql+psycopg://localhost:5432/ecommerce_db"
    DB_USERNAME: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_ECHO: bool = False

    # Connection pool (durations in milliseconds)
    DB_POOL_MAXIMUM_POOL_SIZE: int = 20
    DB_POOL_MINIMUM_IDLE: int = 5
    DB_POOL_CONNECTION_TIMEOUT: int = 30000
    DB_POOL_IDLE_TIMEOUT: int = 600000
    DB_POOL_MAX_LIFETIME: int = 1800000
    DB_POOL_LEAK_DETECTION_THRESHOLD: int = 60000
    DB_POOL_CONNECTION_TEST_QUERY: str = "SELECT 1"

    # Tokens
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            PropertiesFileSettingsSource(settings_cls),
            file_secret_settings,
        )

    @field_validator("DB_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @field_validator("DB_POOL_MAXIMUM_POOL_SIZE", "DB_POOL_MINIMUM_IDLE")
    @classmethod
    def non_negative_pool_size(cls, v: int) -> int:
        if v < 0:
            raise ValueError("pool sizes must not be negative")
        return v

    @property
    def database_url(self) -> str:
        """DB_URL with the configured driver and credentials applied."""
        url = make_url(self.DB_URL)
        if self.DB_DRIVER and "+" not in url.drivername:
            url = url.set(drivername=f"{url.drivername}+{self.DB_DRIVER}")
        if self.DB_USERNAME and not url.username:
            url = url.set(username=self.DB_USERNAME)
        if self.DB_PASSWORD and not url.password:
            url = url.set(password=self.DB_PASSWORD)
        return url.render_as_string(hide_password=False)


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
