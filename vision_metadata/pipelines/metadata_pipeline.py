"""
Metadata pipeline orchestration.

Responsibilities:
- Read the image from the document source as the given actor.
- Ask the vision client for annotations (one call per file).
- Render the payloads for the configured output mode.
- Write each payload to the metadata store.

Non-responsibilities (intentionally not here):
- Formatting rules (annotations/ and rendering/ are pure and I/O free)
- Retries: collaborator failures propagate unchanged to the caller
- HTTP request/response handling (api/)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Literal, Mapping, Sequence, Tuple

import anyio

from vision_metadata.annotations.categories import AnnotationResult
from vision_metadata.clients.documents import ActorContext, DocumentSource, MetadataStore
from vision_metadata.clients.vision_client import VisionClient, validate_features
from vision_metadata.observability.metrics import (
    METADATA_RENDERS_TOTAL,
    METADATA_WRITES_TOTAL,
    VISION_ANNOTATE_SECONDS,
    VISION_REQUESTS_TOTAL,
)
from vision_metadata.rendering.flat_text import render_flat_text_for
from vision_metadata.rendering.structured import DEFAULT_TEMPLATES, TemplateSpec, render_template

logger = logging.getLogger(__name__)

OutputMode = Literal["structured", "flat", "both"]
OUTPUT_MODES = ("structured", "flat", "both")

# (store template key, payload)
RenderedPayload = Tuple[str, Dict[str, str]]


@dataclass(frozen=True)
class PipelineConfig:
    """
    Explicit configuration for one pipeline instance (built from settings by
    the API layer; tests construct it directly).
    """
    features: Tuple[str, ...]
    output_mode: OutputMode = "structured"
    scope: str = "global"
    flat_template_key: str = "imageContent"
    flat_field_key: str = "keywords"
    templates: Tuple[TemplateSpec, ...] = DEFAULT_TEMPLATES

    def __post_init__(self) -> None:
        if self.output_mode not in OUTPUT_MODES:
            raise ValueError(f"output_mode must be one of {OUTPUT_MODES}, got {self.output_mode!r}")
        object.__setattr__(self, "features", tuple(validate_features(self.features)))


@dataclass(frozen=True)
class MetadataPipelineResult:
    file_id: str
    written: Dict[str, Dict[str, str]] = field(default_factory=dict)
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "file_id": self.file_id,
            "written": {k: dict(v) for k, v in self.written.items()},
            "duration_ms": self.duration_ms,
        }


def render_payloads(result: AnnotationResult, config: PipelineConfig) -> List[RenderedPayload]:
    """
    Pure: everything the pipeline will write for one annotation result.
    Structured templates are rendered independently, never merged.
    """
    payloads: List[RenderedPayload] = []

    if config.output_mode in ("flat", "both"):
        payloads.append(
            _counted_render(
                config.flat_template_key,
                lambda: {config.flat_field_key: render_flat_text_for(result)},
            )
        )

    if config.output_mode in ("structured", "both"):
        for spec in config.templates:
            payloads.append(_counted_render(spec.template_key, lambda spec=spec: render_template(result, spec)))

    return payloads


def _counted_render(template_key: str, render: Callable[[], Dict[str, str]]) -> RenderedPayload:
    try:
        document = render()
    except Exception:
        METADATA_RENDERS_TOTAL.labels(template=template_key, result="failed").inc()
        logger.exception("metadata_render_failed template=%s", template_key)
        raise
    METADATA_RENDERS_TOTAL.labels(template=template_key, result="ok").inc()
    return template_key, document


class MetadataPipeline:
    """
    Orchestrates one trigger: read -> annotate -> render -> write.
    """

    def __init__(
        self,
        *,
        vision: VisionClient,
        source: DocumentSource,
        store: MetadataStore,
        config: PipelineConfig,
    ):
        self._vision = vision
        self._source = source
        self._store = store
        self._config = config

    async def run(self, file_id: str, actor: ActorContext) -> MetadataPipelineResult:
        t0 = time.perf_counter()

        image_bytes = await self._source.read(file_id, actor)
        annotations = await self._annotate(image_bytes)

        payloads = render_payloads(annotations, self._config)
        await self._write_all(file_id, payloads)

        duration_ms = int((time.perf_counter() - t0) * 1000)
        logger.info(
            "metadata_ok file_id=%s actor=%s:%s templates=%s duration_ms=%d",
            file_id,
            actor.kind,
            actor.id,
            ",".join(key for key, _ in payloads),
            duration_ms,
        )
        return MetadataPipelineResult(
            file_id=file_id,
            written={key: doc for key, doc in payloads},
            duration_ms=duration_ms,
        )

    async def _annotate(self, image_bytes: bytes) -> AnnotationResult:
        provider = getattr(self._vision, "provider", "unknown")
        t0 = time.perf_counter()
        try:
            result = await self._vision.annotate(image_bytes, self._config.features)
        except Exception:
            VISION_REQUESTS_TOTAL.labels(provider=provider, result="failed").inc()
            logger.exception("vision_failed provider=%s", provider)
            raise
        finally:
            VISION_ANNOTATE_SECONDS.labels(provider=provider).observe(time.perf_counter() - t0)

        VISION_REQUESTS_TOTAL.labels(provider=provider, result="ok").inc()
        return result

    async def _write_all(self, file_id: str, payloads: Sequence[RenderedPayload]) -> None:
        # Payloads are independent; write them concurrently.
        try:
            async with anyio.create_task_group() as tg:
                for template_key, document in payloads:
                    tg.start_soon(self._write_one, file_id, template_key, document)
        except BaseExceptionGroup as eg:
            # Surface the store's own error, not the task group wrapper.
            first = eg.exceptions[0]
            while isinstance(first, BaseExceptionGroup):
                first = first.exceptions[0]
            raise first

    async def _write_one(self, file_id: str, template_key: str, document: Mapping[str, str]) -> None:
        try:
            await self._store.write(file_id, self._config.scope, template_key, document)
        except Exception:
            METADATA_WRITES_TOTAL.labels(template=template_key, result="failed").inc()
            logger.exception("metadata_write_failed file_id=%s template=%s", file_id, template_key)
            raise
        METADATA_WRITES_TOTAL.labels(template=template_key, result="ok").inc()
