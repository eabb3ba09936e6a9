from __future__ import annotations

from indexutils.services.docids import DocidResolver
from indexutils.services.errors import NotStoredError
from indexutils.services.handle import IndexHandle
from indexutils.services.text import (
    HtmlExtractor,
    PunktSentenceSegmenter,
    SentenceSegmenter,
    SoupHtmlExtractor,
)


class DocumentAccessor:
    def __init__(
        self,
        handle: IndexHandle,
        *,
        resolver: DocidResolver | None = None,
        html_extractor: HtmlExtractor | None = None,
        segmenter: SentenceSegmenter | None = None,
    ) -> None:
        self._handle = handle
        self._resolver = resolver or DocidResolver(handle)
        self._html_extractor = html_extractor or SoupHtmlExtractor()
        self._segmenter = segmenter or PunktSentenceSegmenter()

    def _stored_value(self, external_id: str, fieldname: str, what: str) -> str:
        ordinal = self._resolver.resolve_internal(external_id)
        value = self._handle.stored_fields(ordinal).get(fieldname)
        if value is None:
            raise NotStoredError(what, external_id)
        return str(value)

    def get_raw(self, external_id: str) -> str:
        return self._stored_value(external_id, self._handle.fields.raw, "Raw document")

    def get_transformed(self, external_id: str) -> str:
        return self._stored_value(external_id, self._handle.fields.body, "Transformed document")

    def get_term_vector(self, external_id: str) -> list[tuple[str, int]]:
        ordinal = self._resolver.resolve_internal(external_id)
        vector = self._handle.term_vector(ordinal, self._handle.fields.body)
        if vector is None:
            raise NotStoredError("Document vector", external_id)
        return vector

    def get_sentences(self, external_id: str) -> list[str]:
        # Transformed text is preferred; raw markup is only used when it is absent.
        try:
            text = self.get_transformed(external_id)
        except NotStoredError:
            text = self._html_extractor.extract_text(self.get_raw(external_id))
        return self._segmenter.split(text)
