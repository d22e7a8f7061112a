from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union


# =============================================================================
# Category names (vision service response keys, in priority order)
# =============================================================================

ENTITY_ANNOTATION_TYPES: Tuple[str, ...] = (
    "landmarkAnnotations",
    "logoAnnotations",
    "labelAnnotations",
    "textAnnotations",
)
FULL_TEXT_ANNOTATION_TYPES: Tuple[str, ...] = ("fullTextAnnotation",)
IMAGE_PROPERTIES_ANNOTATION_TYPES: Tuple[str, ...] = ("imagePropertiesAnnotation",)

# Returned by the service but never formatted.
UNSUPPORTED_ANNOTATION_TYPES: Tuple[str, ...] = (
    "faceAnnotations",
    "cropHintsAnnotation",
    "safeSearchAnnotation",
    "webDetection",
)

# An annotation result is the service response as a plain mapping.
AnnotationResult = Mapping[str, Any]


# =============================================================================
# Typed category payloads
# =============================================================================

@dataclass(frozen=True)
class EntityAnnotations:
    """
    Landmarks, logos, labels or detected text snippets.

    descriptions keep the service order (relevance / confidence).
    """
    name: str
    descriptions: Tuple[str, ...]


@dataclass(frozen=True)
class FullTextAnnotation:
    name: str
    text: str


@dataclass(frozen=True)
class DominantColor:
    red: int
    green: int
    blue: int
    score: float


@dataclass(frozen=True)
class ImagePropertiesAnnotation:
    """
    Dominant colors in dominance order.
    """
    name: str
    colors: Tuple[DominantColor, ...]


@dataclass(frozen=True)
class UnsupportedAnnotation:
    """
    A category the service can return but that has no formatting yet
    (faces, crop hints, safe search, web detection).
    """
    name: str


AnnotationCategory = Union[
    EntityAnnotations,
    FullTextAnnotation,
    ImagePropertiesAnnotation,
    UnsupportedAnnotation,
]


# =============================================================================
# Parsing (tolerant: malformed == absent)
# =============================================================================

def parse_category(name: str, payload: Any) -> Optional[AnnotationCategory]:
    """
    Convert one raw category payload into its typed variant.

    Returns None when the name is unknown or the payload is missing, empty or
    not shaped like its category. Never raises.
    """
    if payload is None:
        return None

    if name in ENTITY_ANNOTATION_TYPES:
        return _parse_entities(name, payload)
    if name in FULL_TEXT_ANNOTATION_TYPES:
        return _parse_full_text(name, payload)
    if name in IMAGE_PROPERTIES_ANNOTATION_TYPES:
        return _parse_image_properties(name, payload)
    if name in UNSUPPORTED_ANNOTATION_TYPES:
        return UnsupportedAnnotation(name=name) if payload else None
    return None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _parse_entities(name: str, payload: Any) -> Optional[EntityAnnotations]:
    if not _is_sequence(payload):
        return None

    descriptions: List[str] = []
    for item in payload:
        if not isinstance(item, Mapping):
            continue
        description = item.get("description")
        if isinstance(description, str) and description:
            descriptions.append(description)

    if not descriptions:
        return None
    return EntityAnnotations(name=name, descriptions=tuple(descriptions))


def _parse_full_text(name: str, payload: Any) -> Optional[FullTextAnnotation]:
    if not isinstance(payload, Mapping):
        return None
    text = payload.get("text")
    if not isinstance(text, str) or not text:
        return None
    return FullTextAnnotation(name=name, text=text)


def _parse_image_properties(name: str, payload: Any) -> Optional[ImagePropertiesAnnotation]:
    if not isinstance(payload, Mapping):
        return None
    dominant = payload.get("dominantColors")
    if not isinstance(dominant, Mapping):
        return None
    raw_colors = dominant.get("colors")
    if not _is_sequence(raw_colors):
        return None

    colors: List[DominantColor] = []
    for item in raw_colors:
        if not isinstance(item, Mapping):
            continue
        rgb = item.get("color")
        if not isinstance(rgb, Mapping):
            rgb = {}
        colors.append(
            DominantColor(
                red=_channel(rgb.get("red")),
                green=_channel(rgb.get("green")),
                blue=_channel(rgb.get("blue")),
                score=_safe_float(item.get("score")),
            )
        )

    if not colors:
        return None
    return ImagePropertiesAnnotation(name=name, colors=tuple(colors))


def _channel(value: Any) -> int:
    # Protobuf JSON omits zero-valued channels.
    try:
        v = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, min(255, v))


def _safe_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
