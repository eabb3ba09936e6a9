from collections.abc import Callable
from pathlib import Path

import pytest

from indexutils.services.documents import DocumentAccessor
from indexutils.services.errors import IdentifierNotFoundError, NotStoredError
from indexutils.services.handle import IndexHandle, open_index
from indexutils.services.text import PunktSentenceSegmenter, SoupHtmlExtractor


class FakeHtmlExtractor:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def extract_text(self, markup: str) -> str:
        self.calls.append(markup)
        return "stripped"


class FakeSegmenter:
    def split(self, text: str) -> list[str]:
        return [f"segment:{text}"]


def test_get_raw_and_transformed(handle: IndexHandle) -> None:
    documents = DocumentAccessor(handle)

    assert documents.get_raw("d2") == "<p>Cats sleep. A dog barks.</p>"
    assert documents.get_transformed("d2") == "Cats sleep. A dog barks."


def test_missing_raw_field_is_not_stored(handle: IndexHandle) -> None:
    with pytest.raises(NotStoredError, match="Raw document"):
        DocumentAccessor(handle).get_raw("d3")


def test_unknown_docid_is_distinct_from_not_stored(handle: IndexHandle) -> None:
    documents = DocumentAccessor(handle)

    with pytest.raises(IdentifierNotFoundError):
        documents.get_raw("missing")
    with pytest.raises(IdentifierNotFoundError):
        documents.get_sentences("missing")


def test_term_vector_lists_document_term_frequencies(handle: IndexHandle) -> None:
    vector = DocumentAccessor(handle).get_term_vector("d1")

    assert dict(vector) == {"bark": 1, "dog": 2, "fast": 1, "run": 2}


def test_term_vector_not_stored_without_vectors(index_factory: Callable[..., Path]) -> None:
    path = index_factory([{"id": "d1", "contents": "dogs"}], name="novectors", vectors=False)

    with open_index(path) as opened:
        with pytest.raises(NotStoredError, match="Document vector"):
            DocumentAccessor(opened).get_term_vector("d1")


def test_sentences_prefer_transformed_text(index_factory: Callable[..., Path]) -> None:
    path = index_factory([{"id": "d1", "contents": "transformed text"}], name="transformed_only")
    extractor = FakeHtmlExtractor()

    with open_index(path) as opened:
        documents = DocumentAccessor(opened, html_extractor=extractor, segmenter=FakeSegmenter())
        sentences = documents.get_sentences("d1")

    assert sentences == ["segment:transformed text"]
    assert extractor.calls == []


def test_sentences_fall_back_to_stripped_raw(index_factory: Callable[..., Path]) -> None:
    path = index_factory(
        [{"id": "d1", "contents": "indexed only", "raw": "<p>raw markup</p>"}],
        name="raw_only",
        store_contents=False,
    )
    extractor = FakeHtmlExtractor()

    with open_index(path) as opened:
        documents = DocumentAccessor(opened, html_extractor=extractor, segmenter=FakeSegmenter())
        sentences = documents.get_sentences("d1")

    assert sentences == ["segment:stripped"]
    assert extractor.calls == ["<p>raw markup</p>"]


def test_sentences_not_stored_when_both_fields_absent(index_factory: Callable[..., Path]) -> None:
    path = index_factory(
        [{"id": "d1", "contents": "indexed only"}],
        name="neither",
        store_contents=False,
    )

    with open_index(path) as opened:
        documents = DocumentAccessor(opened, segmenter=FakeSegmenter())
        with pytest.raises(NotStoredError, match="Raw document"):
            documents.get_sentences("d1")


def test_default_collaborators_strip_markup_and_split_sentences() -> None:
    text = SoupHtmlExtractor().extract_text(
        "<html><body><p>Dogs run fast.</p>\n<p>Running   dogs bark.</p></body></html>"
    )

    assert text == "Dogs run fast. Running dogs bark."
    assert PunktSentenceSegmenter().split(text) == ["Dogs run fast.", "Running dogs bark."]
