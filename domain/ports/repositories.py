from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from domain.models import SceneDocument


class SceneRepository(Protocol):
    def load(self, path: Path) -> dict[str, Any]: ...

    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, dict[str, Any]]]: ...

    def save(self, document: SceneDocument, path: Path) -> None: ...
