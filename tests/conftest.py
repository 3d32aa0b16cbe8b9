from __future__ import annotations

import os
from collections.abc import Generator

import pytest

from app.config import AppSettings
from domain.services.normalize_scene import SceneNormalizer
from tests.helpers.fakes import fixed_normalizer


def _clear_dsc_env() -> None:
    for key in list(os.environ):
        if key.startswith("DSC_"):
            os.environ.pop(key, None)


_clear_dsc_env()


@pytest.fixture(autouse=True)
def clear_dsc_env() -> Generator[None, None, None]:
    _clear_dsc_env()
    yield
    _clear_dsc_env()


@pytest.fixture
def normalizer() -> SceneNormalizer:
    return fixed_normalizer()


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        generation={"base_url": "http://generator.test", "endpoint": "/webhook/generate-diagram"},
        parser={"endpoint_url": "http://parser.test/parse", "font_size": 20},
        excalidraw_base_url="http://testserver/excalidraw",
    )
