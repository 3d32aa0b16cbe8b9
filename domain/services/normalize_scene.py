from __future__ import annotations

import copy
import logging
import random
import time
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from domain.models import (
    BASE_DEFAULTS,
    DEFAULT_APP_STATE,
    KIND_DEFAULTS,
    SEED_UPPER_BOUND,
    TEXT_KIND,
    Computed,
    DiagramElement,
    PartialElement,
    SceneDocument,
    element_class_for,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def epoch_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class _Resolution:
    """State visible to computed defaults while one element is being completed."""

    kind: str
    rng: random.Random
    clock: Clock
    values: Dict[str, Any] = field(default_factory=dict)

    def random_seed(self) -> int:
        return self.rng.randrange(SEED_UPPER_BOUND)

    def now(self) -> int:
        return self.clock()


class SceneNormalizer:
    """Completes loosely specified elements so a renderer can draw them as-is.

    Randomness (``seed``, ``versionNonce``, synthesized ids) and the wall
    clock (``updated``) are injected so callers can make output reproducible.
    """

    def __init__(
        self,
        random_source: random.Random | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.random_source = random_source or random.Random()
        self.clock = clock or epoch_millis

    def normalize_elements(self, elements: Iterable[object]) -> List[DiagramElement]:
        partials = [PartialElement.from_raw(element) for element in elements]
        taken: Set[str] = {partial.id for partial in partials if partial.id}
        seen: Set[str] = set()
        normalized: List[DiagramElement] = []
        for partial in partials:
            element_id = partial.id
            if not element_id or element_id in seen:
                element_id = self._fresh_id(taken)
                taken.add(element_id)
            seen.add(element_id)
            normalized.append(self._complete(partial, element_id))
        return normalized

    def normalize_scene(self, scene: object | None) -> SceneDocument:
        if not isinstance(scene, Mapping):
            return SceneDocument(elements=[], app_state=default_app_state(), files={})
        raw_elements = scene.get("elements")
        if not isinstance(raw_elements, (list, tuple)):
            raw_elements = []
        app_state = scene.get("appState")
        files = scene.get("files")
        return SceneDocument(
            elements=self.normalize_elements(raw_elements),
            app_state=dict(app_state) if isinstance(app_state, Mapping) else default_app_state(),
            files=dict(files) if isinstance(files, Mapping) else {},
        )

    def _complete(self, partial: PartialElement, element_id: str) -> DiagramElement:
        kind = infer_kind(partial)
        resolution = _Resolution(kind=kind, rng=self.random_source, clock=self.clock)
        resolution.values["id"] = element_id
        resolution.values["type"] = kind
        self._apply_defaults(partial, BASE_DEFAULTS, resolution)
        self._apply_defaults(partial, KIND_DEFAULTS.get(kind, {}), resolution)

        element = element_class_for(kind).model_validate(resolution.values)
        if kind == TEXT_KIND and element.text:
            logger.debug(
                "Normalized text element id=%s text=%r fontSize=%s at (%s, %s) size %sx%s",
                element.id,
                element.text,
                element.font_size,
                element.x,
                element.y,
                element.width,
                element.height,
            )
        return element

    def _apply_defaults(
        self,
        partial: PartialElement,
        defaults: Mapping[str, Any],
        resolution: _Resolution,
    ) -> None:
        for name, default in defaults.items():
            value = getattr(partial, name)
            if value is None:
                if isinstance(default, Computed):
                    value = default.compute(resolution)
                else:
                    value = copy.deepcopy(default)
            resolution.values[name] = value

    def _fresh_id(self, taken: Set[str]) -> str:
        while True:
            candidate = str(uuid.UUID(int=self.random_source.getrandbits(128), version=4))
            if candidate not in taken:
                return candidate


def infer_kind(partial: PartialElement) -> str:
    if partial.type:
        return partial.type
    if partial.text is not None:
        return TEXT_KIND
    return "rectangle"


def default_app_state() -> Dict[str, Any]:
    return dict(DEFAULT_APP_STATE)


_default_normalizer = SceneNormalizer()


def normalize_elements(elements: Iterable[object]) -> List[DiagramElement]:
    return _default_normalizer.normalize_elements(elements)


def normalize_scene(scene: object | None) -> SceneDocument:
    return _default_normalizer.normalize_scene(scene)
