from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson
from filelock import FileLock

from domain.models import SceneDocument
from domain.ports.repositories import SceneRepository

SCENE_PATTERNS = ("*.excalidraw", "*.json")


class FileSystemSceneRepository(SceneRepository):
    """Scene files on disk; anything that is not a JSON object loads as an empty scene."""

    def load(self, path: Path) -> dict[str, Any]:
        data = orjson.loads(path.read_bytes())
        return data if isinstance(data, dict) else {}

    def load_all_with_paths(self, directory: Path) -> list[tuple[Path, dict[str, Any]]]:
        return [(path, self.load(path)) for path in sorted(self._iter_paths(directory))]

    def save(self, document: SceneDocument, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        tmp_path = path.with_suffix(f"{path.suffix}.tmp")
        with FileLock(str(lock_path)):
            tmp_path.write_bytes(orjson.dumps(document.to_dict(), option=orjson.OPT_INDENT_2))
            tmp_path.replace(path)

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        for pattern in SCENE_PATTERNS:
            yield from directory.glob(pattern)
