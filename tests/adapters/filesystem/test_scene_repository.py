from __future__ import annotations

from pathlib import Path

from adapters.filesystem.scene_repository import FileSystemSceneRepository
from domain.services.normalize_scene import SceneNormalizer


def test_save_then_load_scene(tmp_path: Path, normalizer: SceneNormalizer) -> None:
    repo = FileSystemSceneRepository()
    document = normalizer.normalize_scene({"elements": [{"text": "Hi"}, {"type": "arrow"}]})
    target = tmp_path / "out" / "scene.excalidraw"

    repo.save(document, target)
    payload = repo.load(target)

    assert payload["type"] == "excalidraw"
    assert [element["type"] for element in payload["elements"]] == ["text", "arrow"]
    assert payload["elements"][0]["text"] == "Hi"
    assert payload["appState"] == document.app_state
    assert not target.with_suffix(".excalidraw.tmp").exists()


def test_load_all_with_paths_is_sorted(tmp_path: Path) -> None:
    (tmp_path / "b.json").write_text('{"elements": []}', encoding="utf-8")
    (tmp_path / "a.excalidraw").write_text('{"elements": [{"id": "x"}]}', encoding="utf-8")
    (tmp_path / "ignored.txt").write_text("{}", encoding="utf-8")

    pairs = FileSystemSceneRepository().load_all_with_paths(tmp_path)

    assert [path.name for path, _ in pairs] == ["a.excalidraw", "b.json"]
    assert pairs[0][1] == {"elements": [{"id": "x"}]}


def test_non_object_file_loads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")

    assert FileSystemSceneRepository().load(path) == {}


def test_saved_scene_is_indented_utf8(tmp_path: Path, normalizer: SceneNormalizer) -> None:
    document = normalizer.normalize_scene({"elements": [{"text": "Привет"}]})
    target = tmp_path / "scene.json"

    FileSystemSceneRepository().save(document, target)
    raw = target.read_text(encoding="utf-8")

    assert "Привет" in raw
    assert raw.startswith('{\n  "type": "excalidraw"')
