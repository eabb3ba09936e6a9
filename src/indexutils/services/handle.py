from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

from whoosh import index as whoosh_index
from whoosh.index import EmptyIndexError, IndexVersionError
from whoosh.query import Every, Term
from whoosh.sorting import FieldFacet

from indexutils.services.errors import IndexOpenError
from indexutils.services.types import FieldInfo, IndexFields, IndexStats, Posting


def _as_text(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class IndexHandle:
    """Read-only gateway to one opened snapshot of a Whoosh index.

    Ordinals handed out by this object are Whoosh docnums and are only
    meaningful while this handle is open.
    """

    def __init__(self, path: Path, ix: Any, *, fields: IndexFields) -> None:
        self.path = path
        self.fields = fields
        self._ix = ix
        self._searcher = ix.searcher()
        self._reader = self._searcher.reader()

    def __enter__(self) -> IndexHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._searcher.close()

    @property
    def name(self) -> str:
        return self.path.resolve().name

    @property
    def schema(self) -> Any:
        return self._ix.schema

    def has_field(self, fieldname: str) -> bool:
        return fieldname in self.schema

    def doc_count(self) -> int:
        return self._reader.doc_count()

    def max_doc(self) -> int:
        return self._reader.doc_count_all()

    def is_live(self, ordinal: int) -> bool:
        return 0 <= ordinal < self.max_doc() and not self._reader.is_deleted(ordinal)

    def stored_fields(self, ordinal: int) -> dict[str, Any]:
        return self._reader.stored_fields(ordinal)

    def search_one(self, fieldname: str, text: str) -> int | None:
        results = self._searcher.search(Term(fieldname, text), limit=1)
        for hit in results:
            return hit.docnum
        return None

    def enumerate_by_value(self, fieldname: str, *, reverse: bool = False) -> list[int]:
        limit = self.max_doc()
        if limit == 0:
            return []
        results = self._searcher.search(
            Every(fieldname),
            limit=limit,
            sortedby=FieldFacet(fieldname, reverse=reverse),
        )
        return [hit.docnum for hit in results]

    def term_frequencies(self, fieldname: str, text: str) -> tuple[int, int]:
        if (fieldname, text) not in self._reader:
            return 0, 0
        return (
            int(self._reader.frequency(fieldname, text)),
            int(self._reader.doc_frequency(fieldname, text)),
        )

    def postings(self, fieldname: str, text: str) -> Iterator[Posting]:
        if (fieldname, text) not in self._reader:
            return
        matcher = self._reader.postings(fieldname, text)
        while matcher.is_active():
            yield Posting(ordinal=matcher.id(), frequency=int(matcher.value_as("frequency")))
            matcher.next()

    def term_vector(self, ordinal: int, fieldname: str) -> list[tuple[str, int]] | None:
        if not self.has_field(fieldname) or not self.schema[fieldname].vector:
            return None
        if not self._reader.has_vector(ordinal, fieldname):
            return None
        return [
            (_as_text(term), int(frequency))
            for term, frequency in self._reader.vector_as("frequency", ordinal, fieldname)
        ]

    def stats(self) -> IndexStats:
        body = self.fields.body
        reader = self._reader
        if self.has_field(body):
            non_empty = sum(
                1 for docnum in reader.all_doc_ids() if reader.doc_field_length(docnum, body, 0) > 0
            )
            unique_terms = sum(1 for _ in reader.lexicon(body))
            total_terms = int(reader.field_length(body))
        else:
            non_empty = unique_terms = total_terms = 0

        fields = tuple(
            FieldInfo(
                name=name,
                format=type(fieldtype.format).__name__ if fieldtype.format is not None else "None",
                indexed=bool(getattr(fieldtype, "indexed", True)),
                stored=bool(fieldtype.stored),
                has_vectors=bool(fieldtype.vector),
            )
            for name, fieldtype in self.schema.items()
        )
        return IndexStats(
            documents=self.doc_count(),
            non_empty_documents=non_empty,
            unique_terms=unique_terms,
            total_terms=total_terms,
            fields=fields,
        )


def open_index(path: str | Path, *, fields: IndexFields | None = None) -> IndexHandle:
    index_dir = Path(path)
    if not index_dir.is_dir():
        raise IndexOpenError(f"Index directory not found: {index_dir}")

    try:
        ix = whoosh_index.open_dir(str(index_dir))
    except (EmptyIndexError, IndexVersionError) as exc:
        raise IndexOpenError(f"Not a readable index: {index_dir} ({exc})") from exc

    return IndexHandle(index_dir, ix, fields=fields or IndexFields())
