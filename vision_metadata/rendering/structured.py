"""
Structured (skills_data) rendering for one metadata template.

Each call builds a fresh document; templates (keywords, transcripts) are
rendered by separate calls and never merged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from vision_metadata.annotations.categories import EntityAnnotations, FullTextAnnotation
from vision_metadata.annotations.selector import (
    KEYWORD_CATEGORIES,
    TRANSCRIPT_CATEGORIES,
    SelectedAnnotation,
    select,
)
from vision_metadata.rendering.errors import UnsupportedCategoryClassError
from vision_metadata.rendering.skills_data import (
    CATEGORY_CLASSES,
    SkillEntry,
    SkillsDataCard,
    SkillsDataDocument,
)


@dataclass(frozen=True)
class TemplateSpec:
    """
    Everything needed to render one template from a raw annotation result.
    """
    template_key: str
    category_class: str
    title: str
    categories: Tuple[str, ...]


KEYWORDS_TEMPLATE = TemplateSpec(
    template_key="keywords",
    category_class="keyword",
    title="Topics",
    categories=KEYWORD_CATEGORIES,
)

TRANSCRIPTS_TEMPLATE = TemplateSpec(
    template_key="transcripts",
    category_class="transcript",
    title="OCR",
    categories=TRANSCRIPT_CATEGORIES,
)

DEFAULT_TEMPLATES: Tuple[TemplateSpec, ...] = (KEYWORDS_TEMPLATE, TRANSCRIPTS_TEMPLATE)


def build_entries(selected: Iterable[SelectedAnnotation]) -> List[SkillEntry]:
    entries: List[SkillEntry] = []
    for _name, category in selected:
        if isinstance(category, EntityAnnotations):
            entries.extend(SkillEntry(text=d) for d in category.descriptions)
        elif isinstance(category, FullTextAnnotation):
            entries.append(SkillEntry(text=category.text))
        # image properties / unsupported: no entries
    return entries


def build_document(
    selected: Iterable[SelectedAnnotation],
    category_class: str,
    title: str,
) -> SkillsDataDocument:
    if category_class not in CATEGORY_CLASSES:
        raise UnsupportedCategoryClassError(
            f"Unsupported category class: {category_class!r} (expected one of {', '.join(CATEGORY_CLASSES)})"
        )

    card = SkillsDataCard(
        skills_data_type=category_class,
        title=title,
        entries=build_entries(selected),
    )
    return SkillsDataDocument(skills_data=[card])


def render_structured(
    selected: Iterable[SelectedAnnotation],
    category_class: str,
    title: str,
    template_key: str,
) -> Dict[str, str]:
    """
    Render selected annotations as {template_key: <skills_data JSON string>}.

    This wrapper is the exact value the metadata store expects.
    Raises UnsupportedCategoryClassError for a category class other than
    "keyword" or "transcript".
    """
    document = build_document(selected, category_class, title)
    return {template_key: document.to_json()}


def render_template(result: Any, spec: TemplateSpec) -> Dict[str, str]:
    return render_structured(
        select(result, spec.categories),
        category_class=spec.category_class,
        title=spec.title,
        template_key=spec.template_key,
    )
