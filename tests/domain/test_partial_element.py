from __future__ import annotations

from domain.models import PartialElement


def test_from_raw_reads_camel_case_aliases() -> None:
    partial = PartialElement.from_raw(
        {"strokeColor": "#123456", "fontSize": 14, "endArrowhead": "bar"}
    )

    assert partial.stroke_color == "#123456"
    assert partial.font_size == 14
    assert partial.end_arrowhead == "bar"


def test_from_raw_drops_only_invalid_fields() -> None:
    partial = PartialElement.from_raw({"opacity": "lots", "width": 10, "strokeStyle": "wavy"})

    assert partial.opacity is None
    assert partial.stroke_style is None
    assert partial.width == 10


def test_from_raw_ignores_unknown_keys_and_non_mappings() -> None:
    assert PartialElement.from_raw({"customData": {"a": 1}}) == PartialElement()
    assert PartialElement.from_raw(["not", "an", "element"]) == PartialElement()


def test_from_raw_returns_partial_unchanged() -> None:
    partial = PartialElement(text="x")

    assert PartialElement.from_raw(partial) is partial
