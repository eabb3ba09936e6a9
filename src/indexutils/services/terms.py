from __future__ import annotations

from whoosh.qparser import QueryParser
from whoosh.query import Term

from indexutils.services.errors import AmbiguousTermError
from indexutils.services.handle import IndexHandle
from indexutils.services.types import TermRecord


class TermStatsReader:
    def __init__(self, handle: IndexHandle, *, fieldname: str | None = None) -> None:
        self._handle = handle
        self._fieldname = fieldname or handle.fields.body
        self._parser = QueryParser(self._fieldname, handle.schema)

    def normalize(self, raw_term: str) -> tuple[str, str]:
        """Run ``raw_term`` through the field's analyzer via the query parser.

        Returns ``(fieldname, text)`` of the single resulting term. Empty input,
        stop words, phrases and boolean expressions are rejected.
        """
        parsed = self._parser.parse(raw_term)
        if not isinstance(parsed, Term):
            raise AmbiguousTermError(raw_term, type(parsed).__name__)
        return parsed.fieldname, str(parsed.text)

    def lookup(self, raw_term: str) -> TermRecord:
        fieldname, text = self.normalize(raw_term)
        collection_frequency, document_frequency = self._handle.term_frequencies(fieldname, text)
        return TermRecord(
            raw_term=raw_term,
            field=fieldname,
            normalized=text,
            collection_frequency=collection_frequency,
            document_frequency=document_frequency,
            postings=self._handle.postings(fieldname, text),
        )
