"""
Cloud Vision adapter.

Credentials come from the library's own environment lookup
(GOOGLE_APPLICATION_CREDENTIALS / workload identity); this module never
handles key material. No retries here: failures are mapped to VisionError
and propagated.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from google.api_core import exceptions as gexc
from google.cloud import vision

from vision_metadata.annotations.categories import AnnotationResult
from vision_metadata.clients.vision_client import (
    VisionDownstreamError,
    VisionTimeoutError,
    validate_features,
)

logger = logging.getLogger(__name__)


class GoogleVisionClient:
    provider = "google"

    def __init__(self, client: Optional[Any] = None):
        # grpc-aio channels bind to the running event loop; built on first annotate
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = vision.ImageAnnotatorAsyncClient()
        return self._client

    async def annotate(self, image_bytes: bytes, features: Sequence[str]) -> AnnotationResult:
        request = vision.AnnotateImageRequest(
            image=vision.Image(content=image_bytes),
            features=[vision.Feature(type_=vision.Feature.Type[f]) for f in validate_features(features)],
        )

        try:
            batch = await self._get_client().batch_annotate_images(requests=[request])
        except gexc.DeadlineExceeded as e:
            raise VisionTimeoutError(f"Cloud Vision timed out: {e}") from e
        except gexc.GoogleAPICallError as e:
            raise VisionDownstreamError(f"Cloud Vision call failed: {e}") from e

        if not batch.responses:
            raise VisionDownstreamError("Cloud Vision returned no response for the image")

        response = batch.responses[0]
        if response.error.code:
            raise VisionDownstreamError(f"Cloud Vision image error {response.error.code}: {response.error.message}")

        # camelCase keys, the same names the category tables use
        result = vision.AnnotateImageResponse.to_dict(response, preserving_proto_field_name=False)
        logger.debug("cloud_vision_ok categories=%s", ",".join(sorted(result)))
        return result
