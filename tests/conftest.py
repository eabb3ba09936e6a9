from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from whoosh import fields, index
from whoosh.analysis import StemmingAnalyzer

from indexutils.config import get_settings
from indexutils.services.handle import IndexHandle, open_index

SAMPLE_DOCUMENTS: list[dict[str, Any]] = [
    {
        "id": "d1",
        "contents": "Dogs run fast. Running dogs bark.",
        "raw": "<html><body><p>Dogs run fast.</p><p>Running dogs bark.</p></body></html>",
    },
    {
        "id": "d2",
        "contents": "Cats sleep. A dog barks.",
        "raw": "<p>Cats sleep. A dog barks.</p>",
    },
    {
        "id": "d3",
        "contents": "Birds fly.",
    },
]


def _schema(*, store_contents: bool, vectors: bool, numeric_ids: bool) -> fields.Schema:
    schema = fields.Schema(
        id=fields.ID(stored=True, unique=True, sortable=True),
        contents=fields.TEXT(
            analyzer=StemmingAnalyzer(stoplist=None),
            stored=store_contents,
            vector=vectors,
        ),
        raw=fields.STORED(),
    )
    if numeric_ids:
        schema.add("id_long", fields.NUMERIC(numtype=int, bits=64, stored=True, sortable=True))
    return schema


def build_index(
    index_dir: Path,
    documents: list[dict[str, Any]],
    *,
    store_contents: bool = True,
    vectors: bool = True,
    numeric_ids: bool = False,
) -> Path:
    index_dir.mkdir(parents=True, exist_ok=True)
    ix = index.create_in(
        str(index_dir),
        _schema(store_contents=store_contents, vectors=vectors, numeric_ids=numeric_ids),
    )
    writer = ix.writer()
    for document in documents:
        writer.add_document(**document)
    writer.commit()
    return index_dir


def delete_documents(index_dir: Path, fieldname: str, values: list[str]) -> None:
    ix = index.open_dir(str(index_dir))
    writer = ix.writer()
    for value in values:
        writer.delete_by_term(fieldname, value)
    # merge=False keeps the deleted docnums in place instead of compacting the segment
    writer.commit(merge=False)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def index_factory(tmp_path: Path) -> Callable[..., Path]:
    def _factory(documents: list[dict[str, Any]], *, name: str = "corpus", **options: bool) -> Path:
        return build_index(tmp_path / name, documents, **options)

    return _factory


@pytest.fixture
def corpus_path(index_factory: Callable[..., Path]) -> Path:
    return index_factory(SAMPLE_DOCUMENTS)


@pytest.fixture
def deleted_corpus_path(index_factory: Callable[..., Path]) -> Path:
    path = index_factory(SAMPLE_DOCUMENTS, name="deleted")
    delete_documents(path, "id", ["d2"])
    return path


@pytest.fixture
def handle(corpus_path: Path) -> Iterator[IndexHandle]:
    with open_index(corpus_path) as opened:
        yield opened
