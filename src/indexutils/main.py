from collections.abc import Iterator
from pathlib import Path
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from indexutils.config import get_settings
from indexutils.services.codec import Compression
from indexutils.services.docids import DocidResolver
from indexutils.services.documents import DocumentAccessor
from indexutils.services.errors import (
    AmbiguousTermError,
    CorruptIndexError,
    IdentifierNotFoundError,
    IndexOpenError,
    IndexUtilsError,
    InputFileError,
    NotStoredError,
)
from indexutils.services.export import dump_all_docids, dump_raw_documents
from indexutils.services.handle import IndexHandle, open_index
from indexutils.services.terms import TermStatsReader
from indexutils.services.types import ExportSummary, IndexFields

app = FastAPI(title="Index Utils API", version="0.1.0")

_STATUS_CODES: list[tuple[type[IndexUtilsError], int]] = [
    (IdentifierNotFoundError, 404),
    (NotStoredError, 409),
    (AmbiguousTermError, 400),
    (InputFileError, 400),
    (IndexOpenError, 503),
    (CorruptIndexError, 500),
]


class DocidDumpRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    compression: Compression = Compression.NONE


class RawDumpRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    docids_path: str = Field(min_length=1)
    prepend_docid: bool = False


def get_index_handle() -> Iterator[IndexHandle]:
    settings = get_settings()
    try:
        handle = open_index(settings.index_path, fields=IndexFields.from_settings(settings))
    except IndexOpenError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    try:
        yield handle
    finally:
        handle.close()


IndexDep = Annotated[IndexHandle, Depends(get_index_handle)]


def _http_error(exc: IndexUtilsError) -> HTTPException:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def _export_input_path(docids_path: str) -> Path:
    """Resolve a request path against the export directory, refusing anything outside it."""
    export_dir = Path(get_settings().export_dir).resolve()
    try:
        candidate = (export_dir / docids_path).resolve()
    except (OSError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not candidate.is_relative_to(export_dir):
        raise HTTPException(
            status_code=400,
            detail=f"Path is outside the export directory: {docids_path}",
        )
    return candidate


def _summary(summary: ExportSummary) -> dict[str, Any]:
    return {"output_path": summary.output_path, "documents": summary.document_count}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/stats")
def stats(handle: IndexDep) -> dict[str, Any]:
    index_stats = handle.stats()
    return {
        "documents": index_stats.documents,
        "non_empty_documents": index_stats.non_empty_documents,
        "unique_terms": index_stats.unique_terms,
        "total_terms": index_stats.total_terms,
        "fields": [
            {
                "name": info.name,
                "format": info.format,
                "indexed": info.indexed,
                "stored": info.stored,
                "has_vectors": info.has_vectors,
            }
            for info in index_stats.fields
        ],
    }


@app.get("/terms/{term}")
def term_info(term: str, handle: IndexDep) -> dict[str, Any]:
    try:
        record = TermStatsReader(handle).lookup(term)
        postings = [
            {"ordinal": posting.ordinal, "frequency": posting.frequency}
            for posting in record.postings
        ]
    except IndexUtilsError as exc:
        raise _http_error(exc) from exc

    return {
        "raw_term": record.raw_term,
        "field": record.field,
        "normalized": record.normalized,
        "collection_frequency": record.collection_frequency,
        "document_frequency": record.document_frequency,
        "postings": postings,
    }


@app.get("/documents/{docid}/raw")
def raw_document(docid: str, handle: IndexDep) -> dict[str, str]:
    try:
        return {"docid": docid, "raw": DocumentAccessor(handle).get_raw(docid)}
    except IndexUtilsError as exc:
        raise _http_error(exc) from exc


@app.get("/documents/{docid}/transformed")
def transformed_document(docid: str, handle: IndexDep) -> dict[str, str]:
    try:
        return {"docid": docid, "transformed": DocumentAccessor(handle).get_transformed(docid)}
    except IndexUtilsError as exc:
        raise _http_error(exc) from exc


@app.get("/documents/{docid}/vector")
def document_vector(docid: str, handle: IndexDep) -> dict[str, Any]:
    try:
        vector = DocumentAccessor(handle).get_term_vector(docid)
    except IndexUtilsError as exc:
        raise _http_error(exc) from exc

    return {
        "docid": docid,
        "terms": [{"term": term, "frequency": frequency} for term, frequency in vector],
    }


@app.get("/documents/{docid}/sentences")
def document_sentences(docid: str, handle: IndexDep) -> dict[str, Any]:
    try:
        return {"docid": docid, "sentences": DocumentAccessor(handle).get_sentences(docid)}
    except IndexUtilsError as exc:
        raise _http_error(exc) from exc


@app.get("/docids/{docid}/ordinal")
def docid_to_ordinal(docid: str, handle: IndexDep) -> dict[str, Any]:
    try:
        return {"docid": docid, "ordinal": DocidResolver(handle).resolve_internal(docid)}
    except IndexUtilsError as exc:
        raise _http_error(exc) from exc


@app.get("/ordinals/{ordinal}/docid")
def ordinal_to_docid(ordinal: int, handle: IndexDep) -> dict[str, Any]:
    try:
        return {"ordinal": ordinal, "docid": DocidResolver(handle).resolve_external(ordinal)}
    except IndexUtilsError as exc:
        raise _http_error(exc) from exc


@app.post("/exports/docids", status_code=201)
def export_docids(request: DocidDumpRequest, handle: IndexDep) -> dict[str, Any]:
    settings = get_settings()
    try:
        summary = dump_all_docids(
            handle,
            request.compression,
            output_dir=Path(settings.export_dir),
        )
    except IndexUtilsError as exc:
        raise _http_error(exc) from exc
    return _summary(summary)


@app.post("/exports/raw", status_code=201)
def export_raw_documents(request: RawDumpRequest, handle: IndexDep) -> dict[str, Any]:
    docids_path = _export_input_path(request.docids_path)
    try:
        summary = dump_raw_documents(
            handle,
            docids_path,
            prepend_docid=request.prepend_docid,
        )
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except OSError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except IndexUtilsError as exc:
        raise _http_error(exc) from exc
    return _summary(summary)


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "indexutils.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    run()
