"""Room relay configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class RelayServerSettings(BaseSettings):
    model_config = {"env_prefix": "RELAY_"}

    host: str = Field(default="127.0.0.1", min_length=1)
    port: int = Field(default=8713, ge=1, le=65535)
    socketio_path: str = Field(default="socket.io", min_length=1)
    log_dir: str = Field(default="backend/logs/relay", min_length=1)
    cors_origins: list[str] = ["http://localhost:5173"]
    # how long an empty room keeps its last persisted snapshot
    snapshot_ttl_seconds: int = Field(default=3600, ge=60)
    max_rooms: int = Field(default=500, ge=1)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, StringListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings
