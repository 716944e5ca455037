"""
Typed view over the template layout document.

A layout is the JSON document stored in Template.layout:

    {
        "version": "1.0",
        "objects": [
            {"type": "text", "content": "...", "fontSize": 48, ...},
            {"type": "image", "src": "...", "size": {...}, "position": {...}}
        ],
        "background": {"type": "color", "color": "#000000"}
    }

Objects are parsed into a small tagged union (TextObject | ImageObject |
OtherObject). Each variant knows which top-level fields a customization may
overwrite; unknown layer types parse as OtherObject and are never patched.
Every variant keeps the full raw field mapping, so fields the editor adds
later survive a parse/serialize round trip untouched.

Objects are addressed by a positional layer key, "{type}_{index}", where
index is the 0-based position in `objects`. Reordering objects therefore
changes which key addresses which object.
"""

import copy
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Dict, FrozenSet, Mapping, Optional, Tuple


def layer_key(object_type: Any, index: int) -> str:
    """Derive the customization key for the object at `index`"""
    return f"{object_type if object_type is not None else ''}_{index}"


@dataclass(frozen=True)
class LayoutObject:
    """Base variant. `raw` is a private deep copy of the object's fields."""
    index: int
    raw: Any

    PATCHABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    @property
    def type(self) -> Optional[str]:
        if isinstance(self.raw, Mapping):
            return self.raw.get("type")
        return None

    @property
    def key(self) -> str:
        return layer_key(self.type, self.index)

    def patched(self, patch: Mapping[str, Any]) -> "LayoutObject":
        """
        Return a copy with whitelisted fields from `patch` overwritten.

        Values replace the whole top-level field (no nested merge). Fields
        outside PATCHABLE_FIELDS and fields supplied as None are ignored.
        """
        updates = {
            name: value
            for name, value in patch.items()
            if name in self.PATCHABLE_FIELDS and value is not None
        }
        if not updates:
            return self

        fields = copy.deepcopy(dict(self.raw))
        for name, value in updates.items():
            fields[name] = copy.deepcopy(value)
        return replace(self, raw=fields)

    def to_dict(self) -> Any:
        return copy.deepcopy(self.raw)


@dataclass(frozen=True)
class TextObject(LayoutObject):
    PATCHABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {"content", "fontSize", "color", "fontFamily", "textAlign"}
    )


@dataclass(frozen=True)
class ImageObject(LayoutObject):
    PATCHABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"src", "size", "position"})


@dataclass(frozen=True)
class OtherObject(LayoutObject):
    """audio, lottie, or any layer type this service does not know about"""


OBJECT_VARIANTS = {
    "text": TextObject,
    "image": ImageObject,
}


def parse_object(index: int, raw: Any) -> LayoutObject:
    object_type = raw.get("type") if isinstance(raw, Mapping) else None
    variant = OBJECT_VARIANTS.get(object_type, OtherObject)
    return variant(index=index, raw=copy.deepcopy(raw))


@dataclass(frozen=True)
class TemplateLayout:
    """
    Parsed layout document.

    `extra` carries every top-level field other than `objects` (version,
    background, and anything the editor adds), so serialization gives back
    exactly what was parsed.
    """
    objects: Tuple[LayoutObject, ...]
    extra: Dict[str, Any]
    has_objects: bool = True

    @classmethod
    def parse(cls, document: Mapping[str, Any]) -> "TemplateLayout":
        document = document or {}
        raw_objects = document.get("objects")
        if not isinstance(raw_objects, list):
            # Nothing addressable; keep whatever was there verbatim
            return cls(objects=(), extra=copy.deepcopy(dict(document)), has_objects=False)

        objects = tuple(parse_object(i, raw) for i, raw in enumerate(raw_objects))
        extra = {k: copy.deepcopy(v) for k, v in document.items() if k != "objects"}
        return cls(objects=objects, extra=extra)

    def with_objects(self, objects) -> "TemplateLayout":
        return replace(self, objects=tuple(objects))

    def to_dict(self) -> Dict[str, Any]:
        document = copy.deepcopy(self.extra)
        if self.has_objects:
            document["objects"] = [obj.to_dict() for obj in self.objects]
        return document
