from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Literal, Mapping, Protocol, Tuple

import anyio


ActorKind = Literal["user", "enterprise"]


@dataclass(frozen=True)
class ActorContext:
    """
    Identity the document store acts as when reading a file.
    An id only; credentials stay with the collaborator.
    """
    kind: ActorKind
    id: str


# -----------------------------
# Errors
# -----------------------------

class DocumentSourceError(RuntimeError):
    """Base class for document read failures."""


class DocumentNotFoundError(DocumentSourceError):
    pass


class MetadataStoreError(RuntimeError):
    """Raised when a metadata write fails."""


# -----------------------------
# Document source
# -----------------------------

class DocumentSource(Protocol):
    async def read(self, file_id: str, actor: ActorContext) -> bytes:
        ...


@dataclass
class InMemoryDocumentSource:
    files: Dict[str, bytes] = field(default_factory=dict)

    async def read(self, file_id: str, actor: ActorContext) -> bytes:
        try:
            return self.files[file_id]
        except KeyError:
            raise DocumentNotFoundError(f"File not found: {file_id}") from None


@dataclass
class LocalDocumentSource:
    """
    Reads `<root>/<file_id>`. Useful for local development.
    """
    root: Path

    async def read(self, file_id: str, actor: ActorContext) -> bytes:
        root = Path(self.root).resolve()
        path = (root / file_id).resolve()
        if root not in path.parents:
            raise DocumentNotFoundError(f"File not found: {file_id}")
        try:
            return await anyio.Path(path).read_bytes()
        except FileNotFoundError:
            raise DocumentNotFoundError(f"File not found: {file_id}") from None
        except OSError as e:
            raise DocumentSourceError(f"Cannot read {file_id}: {e}") from e


def create_document_source(kind: str, root: str = ".") -> DocumentSource:
    k = (kind or "memory").strip().lower()
    if k == "memory":
        return InMemoryDocumentSource()
    if k == "local":
        return LocalDocumentSource(root=Path(root))
    raise ValueError(f"Unsupported document source: {kind}")


# -----------------------------
# Metadata store
# -----------------------------

class MetadataStore(Protocol):
    async def write(
        self,
        file_id: str,
        scope: str,
        template_key: str,
        document: Mapping[str, str],
    ) -> None:
        ...


@dataclass
class InMemoryMetadataStore:
    """
    Keeps the latest document per (file_id, scope, template_key).
    Re-writing the same template replaces it, like the real store's upsert.
    """
    records: Dict[Tuple[str, str, str], Dict[str, str]] = field(default_factory=dict)
    writes: List[Tuple[str, str, str]] = field(default_factory=list)

    async def write(
        self,
        file_id: str,
        scope: str,
        template_key: str,
        document: Mapping[str, str],
    ) -> None:
        key = (file_id, scope, template_key)
        self.records[key] = dict(document)
        self.writes.append(key)


def create_metadata_store(kind: str) -> MetadataStore:
    k = (kind or "memory").strip().lower()
    if k == "memory":
        return InMemoryMetadataStore()
    raise ValueError(f"Unsupported metadata store: {kind}")
