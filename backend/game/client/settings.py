"""Game client configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


# engine.io transports python-socketio can open
SUPPORTED_TRANSPORTS = frozenset({"websocket", "polling"})


class GameClientSettings(BaseSettings):
    model_config = {"env_prefix": "GAME_"}

    server_url: str = Field(default="http://localhost:8713", min_length=1)
    socketio_path: str = Field(default="socket.io", min_length=1)
    transports: list[str] = ["websocket"]
    log_dir: str = Field(default="backend/logs/client", min_length=1)
    # set when the relay does not echo game:action back to its sender
    apply_locally: bool = False
    # multiplies every game's post-game reset delay; 0 resets immediately
    reset_delay_scale: float = Field(default=1.0, ge=0)

    @field_validator("transports", mode="before")
    @classmethod
    def validate_transports(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v, allowed=SUPPORTED_TRANSPORTS)

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
