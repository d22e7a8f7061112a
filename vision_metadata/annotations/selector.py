from __future__ import annotations

from typing import Any, List, Mapping, Sequence, Tuple

from vision_metadata.annotations.categories import (
    ENTITY_ANNOTATION_TYPES,
    FULL_TEXT_ANNOTATION_TYPES,
    IMAGE_PROPERTIES_ANNOTATION_TYPES,
    AnnotationCategory,
    parse_category,
)


SelectedAnnotation = Tuple[str, AnnotationCategory]

# Legacy flat-text output: entities, then full text, then colors.
FLAT_TEXT_CATEGORIES: Tuple[str, ...] = (
    ENTITY_ANNOTATION_TYPES
    + FULL_TEXT_ANNOTATION_TYPES
    + IMAGE_PROPERTIES_ANNOTATION_TYPES
)
KEYWORD_CATEGORIES: Tuple[str, ...] = ("logoAnnotations", "labelAnnotations")
TRANSCRIPT_CATEGORIES: Tuple[str, ...] = FULL_TEXT_ANNOTATION_TYPES


def select(result: Any, categories: Sequence[str]) -> List[SelectedAnnotation]:
    """
    Pick the requested categories out of a raw annotation result.

    - Output follows the order of `categories`, not the order of `result`.
    - Missing, empty or malformed categories are omitted (no placeholder).
    - Unknown names never match. A name requested twice is selected once.
    """
    if not isinstance(result, Mapping):
        return []

    out: List[SelectedAnnotation] = []
    seen = set()
    for name in categories:
        if name in seen:
            continue
        seen.add(name)

        category = parse_category(name, result.get(name))
        if category is not None:
            out.append((name, category))
    return out
