from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from vision_metadata.api.schemas_skill import InvokeSkillResponse, TriggerEvent
from vision_metadata.clients.documents import (
    ActorContext,
    DocumentNotFoundError,
    DocumentSourceError,
    MetadataStoreError,
    create_document_source,
    create_metadata_store,
)
from vision_metadata.clients.vision_client import VisionError, VisionTimeoutError, create_vision_client
from vision_metadata.config import settings
from vision_metadata.pipelines.metadata_pipeline import MetadataPipeline, PipelineConfig

router = APIRouter(prefix="/skills", tags=["skills"])

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_metadata_pipeline() -> MetadataPipeline:
    """
    Dependency provider. Built once from settings; tests override it.
    """
    config = PipelineConfig(
        features=tuple(settings.vision_features),
        output_mode=settings.output_mode,
        scope=settings.metadata_scope,
        flat_template_key=settings.flat_template_key,
        flat_field_key=settings.flat_field_key,
    )
    return MetadataPipeline(
        vision=create_vision_client(settings.vision_provider),
        source=create_document_source(settings.document_source, settings.document_root),
        store=create_metadata_store(settings.metadata_store),
        config=config,
    )


def resolve_actor(event: TriggerEvent) -> ActorContext:
    """
    user mode: read the file as its uploader.
    enterprise mode: read it as the configured tenant.
    """
    mode = (settings.actor_mode or "user").strip().lower()

    if mode == "enterprise":
        if not settings.enterprise_id:
            raise HTTPException(
                status_code=500,
                detail={"code": "config_error", "message": "enterprise_id is required when actor_mode=enterprise"},
            )
        return ActorContext(kind="enterprise", id=settings.enterprise_id)

    if event.source.created_by is None:
        raise HTTPException(
            status_code=400,
            detail={"code": "invalid_parameters", "message": "source.created_by.id is required"},
        )
    return ActorContext(kind="user", id=event.source.created_by.id)


@router.post("/invoke", response_model=InvokeSkillResponse)
async def invoke_skill(
    event: TriggerEvent,
    pipeline: MetadataPipeline = Depends(get_metadata_pipeline),
):
    file_id = event.source.id
    actor = resolve_actor(event)

    try:
        result = await pipeline.run(file_id, actor)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail={"code": "file_not_found", "message": str(e)})
    except DocumentSourceError as e:
        raise HTTPException(status_code=502, detail={"code": "document_source_failed", "message": str(e)})
    except VisionTimeoutError as e:
        raise HTTPException(status_code=504, detail={"code": "timeout", "message": str(e)})
    except VisionError as e:
        raise HTTPException(status_code=502, detail={"code": "vision_failed", "message": str(e)})
    except MetadataStoreError as e:
        raise HTTPException(status_code=502, detail={"code": "metadata_write_failed", "message": str(e)})

    logger.info("skill_invoke_ok file_id=%s templates=%d", file_id, len(result.written))
    return result.to_dict()
