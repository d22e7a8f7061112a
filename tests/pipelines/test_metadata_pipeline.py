import json

import anyio
import pytest
from prometheus_client import REGISTRY

from vision_metadata.clients.documents import (
    ActorContext,
    DocumentNotFoundError,
    InMemoryDocumentSource,
    InMemoryMetadataStore,
    MetadataStoreError,
)
from vision_metadata.clients.vision_client import MockVisionClient, VisionDownstreamError
from vision_metadata.pipelines.metadata_pipeline import (
    MetadataPipeline,
    PipelineConfig,
    render_payloads,
)
from vision_metadata.rendering.errors import UnsupportedCategoryClassError
from vision_metadata.rendering.structured import KEYWORDS_TEMPLATE, TemplateSpec

FEATURES = ("LOGO_DETECTION", "LABEL_DETECTION", "DOCUMENT_TEXT_DETECTION", "IMAGE_PROPERTIES")
ACTOR = ActorContext(kind="user", id="99")

RESULT = {
    "logoAnnotations": [{"description": "Acme"}],
    "labelAnnotations": [{"description": "Box"}],
    "fullTextAnnotation": {"text": "FRAGILE"},
    "imagePropertiesAnnotation": {
        "dominantColors": {"colors": [{"color": {"red": 255, "green": 0, "blue": 0}, "score": 0.9}]}
    },
}


class FailingStore:
    """Fails on one template, records the others."""

    def __init__(self, fail_on: str):
        self.fail_on = fail_on
        self.written = []

    async def write(self, file_id, scope, template_key, document):
        if template_key == self.fail_on:
            raise MetadataStoreError(f"write failed for {template_key}")
        self.written.append(template_key)


def _pipeline(output_mode="structured", vision=None, store=None):
    return MetadataPipeline(
        vision=vision or MockVisionClient(result=RESULT),
        source=InMemoryDocumentSource(files={"f1": b"\x89PNG"}),
        store=store or InMemoryMetadataStore(),
        config=PipelineConfig(features=FEATURES, output_mode=output_mode),
    )


def test_structured_mode_writes_one_document_per_template():
    store = InMemoryMetadataStore()
    vision = MockVisionClient(result=RESULT)
    result = anyio.run(_pipeline(vision=vision, store=store).run, "f1", ACTOR)

    assert set(result.written) == {"keywords", "transcripts"}
    assert set(store.records) == {("f1", "global", "keywords"), ("f1", "global", "transcripts")}

    keywords = json.loads(store.records[("f1", "global", "keywords")]["keywords"])
    assert keywords["skills_data"][0]["entries"] == [{"text": "Acme"}, {"text": "Box"}]

    transcripts = json.loads(store.records[("f1", "global", "transcripts")]["transcripts"])
    assert transcripts["skills_data"][0]["entries"] == [{"text": "FRAGILE"}]

    # one annotate call with the configured features, in order
    assert vision.calls == [(4, FEATURES)]


def test_flat_mode_writes_legacy_text_blob():
    store = InMemoryMetadataStore()
    anyio.run(_pipeline(output_mode="flat", store=store).run, "f1", ACTOR)

    assert store.records == {
        ("f1", "global", "imageContent"): {
            "keywords": (
                "logoAnnotations: Acme\n\n"
                "labelAnnotations: Box\n\n"
                "fullTextAnnotation: FRAGILE\n\n"
                "imagePropertiesAnnotation: red (0.9)\n\n"
            )
        }
    }


def test_both_mode_writes_flat_and_structured():
    result = anyio.run(_pipeline(output_mode="both").run, "f1", ACTOR)
    assert set(result.written) == {"imageContent", "keywords", "transcripts"}


def test_empty_annotations_still_write_empty_documents():
    store = InMemoryMetadataStore()
    anyio.run(_pipeline(vision=MockVisionClient(result={}), store=store).run, "f1", ACTOR)

    doc = json.loads(store.records[("f1", "global", "keywords")]["keywords"])
    assert doc["skills_data"][0]["entries"] == []


def test_render_payloads_is_deterministic():
    config = PipelineConfig(features=FEATURES, output_mode="both")
    assert render_payloads(RESULT, config) == render_payloads(RESULT, config)


def test_vision_failure_propagates_and_nothing_is_written():
    store = InMemoryMetadataStore()
    vision = MockVisionClient(error=VisionDownstreamError("quota exceeded"))

    with pytest.raises(VisionDownstreamError):
        anyio.run(_pipeline(vision=vision, store=store).run, "f1", ACTOR)
    assert store.records == {}


def test_missing_file_propagates():
    with pytest.raises(DocumentNotFoundError):
        anyio.run(_pipeline().run, "missing", ACTOR)


def test_store_failure_propagates_unwrapped():
    with pytest.raises(MetadataStoreError):
        anyio.run(_pipeline(store=FailingStore(fail_on="transcripts")).run, "f1", ACTOR)


def test_config_rejects_bad_output_mode_and_features():
    with pytest.raises(ValueError):
        PipelineConfig(features=FEATURES, output_mode="xml")
    with pytest.raises(ValueError):
        PipelineConfig(features=("NOT_A_FEATURE",))


def _renders(template, result):
    return REGISTRY.get_sample_value("metadata_renders_total", {"template": template, "result": result}) or 0.0


def test_render_failure_is_counted_and_nothing_is_written():
    faces = TemplateSpec(template_key="faces", category_class="face", title="Faces", categories=("faceAnnotations",))
    config = PipelineConfig(features=FEATURES, templates=(KEYWORDS_TEMPLATE, faces))
    store = InMemoryMetadataStore()
    pipeline = MetadataPipeline(
        vision=MockVisionClient(result=RESULT),
        source=InMemoryDocumentSource(files={"f1": b"\x89PNG"}),
        store=store,
        config=config,
    )
    failed_before = _renders("faces", "failed")
    ok_before = _renders("faces", "ok")

    with pytest.raises(UnsupportedCategoryClassError):
        anyio.run(pipeline.run, "f1", ACTOR)

    assert _renders("faces", "failed") == failed_before + 1
    assert _renders("faces", "ok") == ok_before
    assert store.records == {}


def test_successful_render_is_counted_ok():
    before = _renders("transcripts", "ok")
    render_payloads(RESULT, PipelineConfig(features=FEATURES))
    assert _renders("transcripts", "ok") == before + 1
