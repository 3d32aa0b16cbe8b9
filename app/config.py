from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, ClassVar

from pydantic import AfterValidator, BaseModel, Field, HttpUrl, TypeAdapter, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

DEFAULT_CONFIG_PATH = Path("config/app.yaml")
CONFIG_PATH_ENV = "DSC_CONFIG_PATH"

_HTTP_URL_ADAPTER = TypeAdapter(HttpUrl)


def _validate_http_url(value: str) -> str:
    normalized = str(value or "").strip()
    _HTTP_URL_ADAPTER.validate_python(normalized)
    return normalized


ServiceUrl = Annotated[str, AfterValidator(_validate_http_url)]


class GenerationSettings(BaseModel):
    base_url: ServiceUrl = "http://localhost:5678"
    endpoint: str = "/webhook/generate-diagram"
    timeout_seconds: float = Field(default=120.0, gt=0)


class ParserSettings(BaseModel):
    endpoint_url: ServiceUrl = "http://localhost:3001/parse"
    font_size: int = Field(default=20, gt=0)
    timeout_seconds: float = Field(default=30.0, gt=0)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DSC_", env_nested_delimiter="__")

    title: str = "Diagram Scene Convertor"
    generation: GenerationSettings = GenerationSettings()
    parser: ParserSettings = ParserSettings()
    excalidraw_base_url: ServiceUrl = "https://excalidraw.com/"
    log_level: str = "INFO"

    _yaml_path: ClassVar[Path | None] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        return str(value).upper() if value else "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv(CONFIG_PATH_ENV)
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
