from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from vision_metadata.annotations.categories import AnnotationResult


# -----------------------------
# Feature types
# -----------------------------

FEATURE_TYPES: Tuple[str, ...] = (
    "LANDMARK_DETECTION",
    "LOGO_DETECTION",
    "LABEL_DETECTION",
    "TEXT_DETECTION",
    "DOCUMENT_TEXT_DETECTION",
    "IMAGE_PROPERTIES",
    # returned categories are recognized but not formatted
    "FACE_DETECTION",
    "CROP_HINTS",
    "SAFE_SEARCH_DETECTION",
    "WEB_DETECTION",
)


def validate_features(features: Sequence[str]) -> List[str]:
    out: List[str] = []
    for f in features:
        name = str(f).strip().upper()
        if name not in FEATURE_TYPES:
            raise ValueError(f"Unsupported vision feature: {f}")
        out.append(name)
    return out


# -----------------------------
# Errors
# -----------------------------

class VisionError(RuntimeError):
    """Base class for vision service failures."""


class VisionTimeoutError(VisionError):
    """Raised when the vision service times out."""


class VisionDownstreamError(VisionError):
    """
    Raised when the vision service fails in a non-timeout way:
    - quota exceeded
    - transport failure
    - per-image error returned in the response
    """


# -----------------------------
# Client interface
# -----------------------------

class VisionClient(Protocol):
    """
    Image annotation service.

    Implementations:
    - GoogleVisionClient (Cloud Vision)
    - MockVisionClient (tests / local dev)
    """
    provider: str

    async def annotate(self, image_bytes: bytes, features: Sequence[str]) -> AnnotationResult:
        ...


# -----------------------------
# Mock implementation
# -----------------------------

DEFAULT_MOCK_RESULT: Dict[str, Any] = {
    "logoAnnotations": [{"description": "Acme", "score": 0.91}],
    "labelAnnotations": [
        {"description": "Product", "score": 0.95},
        {"description": "Box", "score": 0.88},
    ],
    "fullTextAnnotation": {"text": "ACME\nFragile"},
    "imagePropertiesAnnotation": {
        "dominantColors": {
            "colors": [
                {"color": {"red": 250, "green": 20, "blue": 10}, "score": 0.6},
                {"color": {"red": 255, "green": 255, "blue": 255}, "score": 0.3},
            ]
        }
    },
}


@dataclass
class MockVisionClient:
    """
    Deterministic client: always returns a copy of `result`.
    Calls are recorded so tests can assert on the requested features.
    """
    result: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_MOCK_RESULT))
    error: Optional[Exception] = None
    provider: str = "mock"
    calls: List[Tuple[int, Tuple[str, ...]]] = field(default_factory=list)

    async def annotate(self, image_bytes: bytes, features: Sequence[str]) -> AnnotationResult:
        self.calls.append((len(image_bytes), tuple(features)))
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.result)


# -----------------------------
# Factory
# -----------------------------

def create_vision_client(provider: str) -> VisionClient:
    """
    Lazy-imports the Cloud Vision adapter; mock mode runs without
    google-cloud-vision installed.
    """
    p = (provider or "mock").strip().lower()

    if p == "mock":
        return MockVisionClient()

    if p == "google":
        from vision_metadata.clients.google_vision import GoogleVisionClient

        return GoogleVisionClient()

    raise ValueError(f"Unsupported vision provider: {provider}")
