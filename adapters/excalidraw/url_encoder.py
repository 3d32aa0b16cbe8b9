from __future__ import annotations

import json
from typing import Any, cast

from lzstring import LZString  # type: ignore[import-untyped]

from domain.models import SceneDocument


def encode_scene_payload(scene: dict[str, Any]) -> str:
    payload = json.dumps(scene, ensure_ascii=True, separators=(",", ":"))
    encoded = LZString().compressToEncodedURIComponent(payload)
    return cast(str, encoded)


def build_share_url(base_url: str, document: SceneDocument) -> str:
    """Link that opens the scene in the editor without storing it anywhere."""
    clean_base = base_url.split("#", 1)[0]
    encoded = encode_scene_payload(
        {
            "elements": [element.to_dict() for element in document.elements],
            "appState": document.app_state,
            "files": document.files,
        }
    )
    return f"{clean_base}#json={encoded}"
