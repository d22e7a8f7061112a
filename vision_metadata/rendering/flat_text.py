from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

from vision_metadata.annotations.categories import (
    EntityAnnotations,
    FullTextAnnotation,
    ImagePropertiesAnnotation,
)
from vision_metadata.annotations.colors import name_color
from vision_metadata.annotations.selector import (
    FLAT_TEXT_CATEGORIES,
    SelectedAnnotation,
    select,
)


SECTION_END = "\n\n"
ENTRY_SEPARATOR = ", "


def render_flat_text(selected: Iterable[SelectedAnnotation]) -> str:
    """
    Render selected annotations as one text blob.

    Each section is "<category>: <entries>" followed by a blank line.
    Unsupported categories render nothing. Returns "" if nothing rendered.
    """
    sections: List[str] = []
    for name, category in selected:
        body = _section_body(category)
        if body is None:
            continue
        sections.append(f"{name}: {body}{SECTION_END}")
    return "".join(sections)


def render_flat_text_for(result: Any, categories: Sequence[str] = FLAT_TEXT_CATEGORIES) -> str:
    return render_flat_text(select(result, categories))


def _section_body(category: Any) -> Optional[str]:
    if isinstance(category, EntityAnnotations):
        if not category.descriptions:
            return None
        return ENTRY_SEPARATOR.join(category.descriptions)

    if isinstance(category, FullTextAnnotation):
        return category.text

    if isinstance(category, ImagePropertiesAnnotation):
        if not category.colors:
            return None
        return ENTRY_SEPARATOR.join(
            f"{name_color(c.red, c.green, c.blue)} ({format_score(c.score)})"
            for c in category.colors
        )

    return None


def format_score(score: float) -> str:
    """
    Print a score the way a JavaScript number prints: 0.9 -> "0.9",
    1.0 -> "1", 0.00005 -> "0.00005", 1e-7 -> "1e-7".

    Positional for 1e-7 < |x| < 1e21, exponent form outside that range.
    """
    value = float(score)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))

    text = repr(value)  # shortest round-trip digits
    if "e" not in text:
        return text

    mantissa, exp_text = text.split("e")
    exp = int(exp_text)
    if -7 < exp < 21:
        return format(Decimal(text), "f")
    return f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"
