from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from indexutils.config import Settings


@dataclass(frozen=True)
class IndexFields:
    id: str = "id"
    numeric_id: str = "id_long"
    body: str = "contents"
    raw: str = "raw"

    @classmethod
    def from_settings(cls, settings: Settings) -> IndexFields:
        return cls(
            id=settings.id_field,
            numeric_id=settings.numeric_id_field,
            body=settings.body_field,
            raw=settings.raw_field,
        )


@dataclass(frozen=True)
class Posting:
    ordinal: int
    frequency: int


@dataclass(frozen=True)
class TermRecord:
    raw_term: str
    field: str
    normalized: str
    collection_frequency: int
    document_frequency: int
    postings: Iterator[Posting] = field(compare=False, repr=False)


@dataclass(frozen=True)
class FieldInfo:
    name: str
    format: str
    indexed: bool
    stored: bool
    has_vectors: bool


@dataclass(frozen=True)
class IndexStats:
    documents: int
    non_empty_documents: int
    unique_terms: int
    total_terms: int
    fields: tuple[FieldInfo, ...]


@dataclass(frozen=True)
class ExportSummary:
    output_path: str
    document_count: int
