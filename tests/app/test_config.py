from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from app.config import AppSettings, load_settings


def test_defaults() -> None:
    settings = AppSettings()

    assert settings.generation.base_url == "http://localhost:5678"
    assert settings.generation.endpoint == "/webhook/generate-diagram"
    assert settings.parser.font_size == 20
    assert settings.log_level == "INFO"


def test_env_overrides_nested_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DSC_PARSER__FONT_SIZE", "24")
    monkeypatch.setenv("DSC_GENERATION__BASE_URL", "http://n8n.internal:5678")
    monkeypatch.setenv("DSC_LOG_LEVEL", "debug")

    settings = AppSettings()

    assert settings.parser.font_size == 24
    assert settings.generation.base_url == "http://n8n.internal:5678"
    assert settings.log_level == "DEBUG"


def test_load_settings_from_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "app.yaml"
    config_path.write_text(
        "generation:\n"
        "  base_url: http://generator.local\n"
        "  timeout_seconds: 5\n"
        "parser:\n"
        "  endpoint_url: http://parser.local/parse\n",
        encoding="utf-8",
    )

    settings = load_settings(config_path)

    assert settings.generation.base_url == "http://generator.local"
    assert settings.generation.timeout_seconds == 5
    assert settings.parser.endpoint_url == "http://parser.local/parse"
    assert AppSettings._yaml_path is None


def test_env_wins_over_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "app.yaml"
    config_path.write_text("parser:\n  font_size: 12\n", encoding="utf-8")
    monkeypatch.setenv("DSC_CONFIG_PATH", str(config_path))
    monkeypatch.setenv("DSC_PARSER__FONT_SIZE", "30")

    assert load_settings().parser.font_size == 30


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_invalid_service_url_is_rejected() -> None:
    with pytest.raises(ValidationError):
        AppSettings(generation={"base_url": "not a url"})
