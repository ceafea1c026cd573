from functools import lru_cache
from typing import List, Tuple, Type
import os

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=f"config/{os.getenv('ENV', 'local')}.env",
        yaml_file=["config.yaml", "configs/config.yaml"],
        case_sensitive=False,
        extra="ignore",
    )

    db_host: str
    db_port: int = 5432
    db_user: str
    db_password: str = ""
    db_name: str
    db_pool_size: int = 10
    db_max_overflow: int = 20

    server_host: str = "0.0.0.0"
    server_port: int = 8080
    # Seconds allowed for in-flight requests to drain on SIGINT/SIGTERM
    shutdown_timeout: int = 5

    log_level: str = "INFO"
    environment: str = "local"
    auto_create_tables: bool = True
    cors_origins: List[str] = ["*"]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Environment wins over the .env file, which wins over YAML."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def database_url(self) -> URL:
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
