from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

SCENE_SOURCE = "diagram-scene-convertor"

FillStyle = Literal["solid", "hachure", "cross-hatch"]
StrokeStyle = Literal["solid", "dashed", "dotted"]
OutputFormat = Literal["mermaid", "excalidraw"]

TEXT_KIND = "text"
LINEAR_KINDS = frozenset({"arrow", "line"})

SEED_UPPER_BOUND = 2**31
UINT32_UPPER_BOUND = 2**32

Point = Tuple[float, float]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PartialElement(_CamelModel):
    """Loosely specified element as emitted by a generator or a parser.

    Every field is optional; ``None`` means "not supplied". Use
    :meth:`from_raw` for untrusted payloads.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    type: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = Field(default=None, ge=0)
    height: Optional[float] = Field(default=None, ge=0)
    angle: Optional[float] = None
    stroke_color: Optional[str] = None
    background_color: Optional[str] = None
    fill_style: Optional[FillStyle] = None
    stroke_width: Optional[float] = Field(default=None, ge=0)
    stroke_style: Optional[StrokeStyle] = None
    roughness: Optional[float] = Field(default=None, ge=0)
    opacity: Optional[int] = Field(default=None, ge=0, le=100)
    group_ids: Optional[List[str]] = None
    frame_id: Optional[str] = None
    roundness: Optional[Dict[str, Any]] = None
    seed: Optional[int] = Field(default=None, ge=0, lt=UINT32_UPPER_BOUND)
    version: Optional[int] = Field(default=None, ge=1)
    version_nonce: Optional[int] = Field(default=None, ge=0, lt=UINT32_UPPER_BOUND)
    is_deleted: Optional[bool] = None
    bound_elements: Optional[List[Dict[str, Any]]] = None
    updated: Optional[int] = None
    link: Optional[str] = None
    locked: Optional[bool] = None

    text: Optional[str] = None
    font_size: Optional[float] = Field(default=None, gt=0)
    font_family: Optional[int] = None
    text_align: Optional[str] = None
    vertical_align: Optional[str] = None
    baseline: Optional[float] = None
    container_id: Optional[str] = None
    original_text: Optional[str] = None
    line_height: Optional[float] = Field(default=None, gt=0)

    points: Optional[List[Point]] = Field(default=None, min_length=2)
    last_committed_point: Optional[Point] = None
    start_binding: Optional[Dict[str, Any]] = None
    end_binding: Optional[Dict[str, Any]] = None
    start_arrowhead: Optional[str] = None
    end_arrowhead: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: object) -> PartialElement:
        """Validate a raw payload, dropping every field that does not validate."""
        if isinstance(raw, PartialElement):
            return raw
        if not isinstance(raw, Mapping):
            return cls()
        spellings = _field_spellings()
        payload = {key: value for key, value in raw.items() if key in spellings}
        while True:
            try:
                return cls.model_validate(payload)
            except ValidationError as exc:
                invalid = {
                    spellings.get(str(error["loc"][0]))
                    for error in exc.errors()
                    if error["loc"]
                }
                dropped = [key for key in payload if spellings[key] in invalid]
                if not dropped:
                    return cls()
                for key in dropped:
                    del payload[key]


def _field_spellings() -> Dict[str, str]:
    """Map every accepted key (field name or camelCase alias) to its field name."""
    spellings: Dict[str, str] = {}
    for name, info in PartialElement.model_fields.items():
        spellings[name] = name
        if info.alias:
            spellings[info.alias] = name
    return spellings


class DiagramElement(_CamelModel):
    """Fully specified element; shapes and unknown kinds carry only this record."""

    id: str
    type: str
    x: float
    y: float
    width: float
    height: float
    angle: float
    stroke_color: str
    background_color: str
    fill_style: FillStyle
    stroke_width: float
    stroke_style: StrokeStyle
    roughness: float
    opacity: int
    group_ids: List[str]
    frame_id: Optional[str]
    roundness: Optional[Dict[str, Any]]
    seed: int
    version: int
    version_nonce: int
    is_deleted: bool
    bound_elements: Optional[List[Dict[str, Any]]]
    updated: int
    link: Optional[str]
    locked: bool

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class TextElement(DiagramElement):
    text: str
    font_size: float
    font_family: int
    text_align: str
    vertical_align: str
    baseline: float
    container_id: Optional[str]
    original_text: str
    line_height: float


class LinearElement(DiagramElement):
    points: List[Point] = Field(min_length=2)
    last_committed_point: Optional[Point]
    start_binding: Optional[Dict[str, Any]]
    end_binding: Optional[Dict[str, Any]]
    start_arrowhead: Optional[str]
    end_arrowhead: Optional[str]


def element_class_for(kind: str) -> type[DiagramElement]:
    if kind == TEXT_KIND:
        return TextElement
    if kind in LINEAR_KINDS:
        return LinearElement
    return DiagramElement


@dataclass(frozen=True)
class Computed:
    """Default derived from the resolution context instead of a constant."""

    compute: Callable[[Any], Any]


BASE_DEFAULTS: Dict[str, Any] = {
    "x": 0.0,
    "y": 0.0,
    "width": 100.0,
    "height": 100.0,
    "angle": 0.0,
    "stroke_color": "#1e1e1e",
    "background_color": "transparent",
    "fill_style": "solid",
    "stroke_width": 2.0,
    "stroke_style": "solid",
    "roughness": 1.0,
    "opacity": 100,
    "group_ids": [],
    "frame_id": None,
    "roundness": Computed(lambda ctx: {"type": 3} if ctx.kind == "rectangle" else None),
    "seed": Computed(lambda ctx: ctx.random_seed()),
    "version": 1,
    "version_nonce": Computed(lambda ctx: ctx.random_seed()),
    "is_deleted": False,
    "bound_elements": None,
    "updated": Computed(lambda ctx: ctx.now()),
    "link": None,
    "locked": False,
}

_TEXT_DEFAULTS: Dict[str, Any] = {
    "text": "",
    "font_size": 20.0,
    "font_family": 1,
    "text_align": "center",
    "vertical_align": "middle",
    "baseline": Computed(lambda ctx: ctx.values["font_size"]),
    "container_id": None,
    "original_text": Computed(lambda ctx: ctx.values["text"]),
    "line_height": 1.25,
}

_LINEAR_DEFAULTS: Dict[str, Any] = {
    "points": Computed(lambda ctx: [(0.0, 0.0), (ctx.values["width"], ctx.values["height"])]),
    "last_committed_point": None,
    "start_binding": None,
    "end_binding": None,
    "start_arrowhead": None,
    "end_arrowhead": Computed(lambda ctx: "arrow" if ctx.kind == "arrow" else None),
}

KIND_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "text": _TEXT_DEFAULTS,
    "arrow": _LINEAR_DEFAULTS,
    "line": _LINEAR_DEFAULTS,
}

DEFAULT_APP_STATE: Dict[str, Any] = {
    "viewBackgroundColor": "#ffffff",
    "currentItemStrokeColor": BASE_DEFAULTS["stroke_color"],
    "currentItemBackgroundColor": BASE_DEFAULTS["background_color"],
    "currentItemFillStyle": BASE_DEFAULTS["fill_style"],
    "currentItemStrokeWidth": 2,
    "currentItemStrokeStyle": BASE_DEFAULTS["stroke_style"],
    "currentItemRoughness": 1,
    "currentItemOpacity": BASE_DEFAULTS["opacity"],
    "currentItemFontFamily": _TEXT_DEFAULTS["font_family"],
    "currentItemFontSize": 20,
    "currentItemTextAlign": "left",
    "currentItemStartArrowhead": None,
    "currentItemEndArrowhead": "arrow",
}


@dataclass(frozen=True)
class SceneDocument:
    elements: List[DiagramElement]
    app_state: dict
    files: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": "excalidraw",
            "version": 2,
            "source": SCENE_SOURCE,
            "elements": [element.to_dict() for element in self.elements],
            "appState": self.app_state,
            "files": self.files,
        }


class DiagramRequest(_CamelModel):
    prompt: str
    current_scene: Any = None
    output_format: OutputFormat = "mermaid"

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class DiagramResponse(BaseModel):
    format: OutputFormat
    update: Any = None
    data: Any = None


@dataclass(frozen=True)
class ConversionResult:
    """Elements and auxiliary files exactly as the Mermaid parser produced them."""

    elements: List[dict]
    files: Optional[dict] = None

    def to_scene_payload(self) -> dict:
        return {"elements": self.elements, "files": self.files or {}}
