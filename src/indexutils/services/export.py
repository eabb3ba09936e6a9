from __future__ import annotations

from collections.abc import Iterator
from contextlib import closing
from dataclasses import dataclass
import io
from pathlib import Path
import tarfile
import time
from typing import BinaryIO
import zipfile

from indexutils.services.codec import Compression, open_read, open_write, output_path_for
from indexutils.services.docids import DocidResolver
from indexutils.services.errors import CorruptIndexError, InputFileError, NotStoredError
from indexutils.services.handle import IndexHandle
from indexutils.services.types import ExportSummary, IndexFields

DOCNO_MARKER = "<DOCNO>{docid}</DOCNO>\n"
RAW_DUMP_SUFFIX = ".output.tar.gz"


@dataclass(frozen=True)
class TieBreak:
    """Ordering used to enumerate every document of an index."""

    field: str
    reverse: bool = False

    @classmethod
    def by_docid(cls, fields: IndexFields) -> TieBreak:
        return cls(field=fields.id, reverse=False)

    @classmethod
    def by_numeric_id(cls, fields: IndexFields) -> TieBreak:
        return cls(field=fields.numeric_id, reverse=True)


def select_tie_break(handle: IndexHandle) -> TieBreak:
    if handle.has_field(handle.fields.numeric_id):
        return TieBreak.by_numeric_id(handle.fields)
    return TieBreak.by_docid(handle.fields)


def _docid_marker(docid: str) -> bytes:
    return DOCNO_MARKER.format(docid=docid).encode("utf-8")


def _iter_docids(stream: BinaryIO, source: Path) -> Iterator[str]:
    try:
        for line in io.TextIOWrapper(stream, encoding="utf-8"):
            docid = line.strip()
            if docid:
                yield docid
    except (OSError, EOFError, UnicodeDecodeError, zipfile.BadZipFile) as exc:
        raise InputFileError(source, str(exc)) from exc


def dump_all_docids(
    handle: IndexHandle,
    compression: Compression,
    *,
    output_dir: Path,
    tie_break: TieBreak | None = None,
) -> ExportSummary:
    ordering = tie_break or select_tie_break(handle)
    ordinals = handle.enumerate_by_value(ordering.field, reverse=ordering.reverse)
    id_field = handle.fields.id

    output_dir.mkdir(parents=True, exist_ok=True)
    base_path = output_dir / f"{handle.name}.allDocids"

    with open_write(base_path, compression) as sink:
        for ordinal in ordinals:
            docid = handle.stored_fields(ordinal).get(id_field)
            if docid is None:
                raise CorruptIndexError(f"Document {ordinal} has no stored {id_field!r} field")
            sink.write(f"{docid}\n".encode("utf-8"))

    return ExportSummary(
        output_path=str(output_path_for(base_path, compression)),
        document_count=len(ordinals),
    )


def dump_raw_documents(
    handle: IndexHandle,
    docids_path: Path,
    *,
    prepend_docid: bool,
    resolver: DocidResolver | None = None,
) -> ExportSummary:
    """Write the raw field of every listed docid into ``<docids_path>.output.tar.gz``.

    The first docid without a stored raw field aborts the dump with
    ``NotStoredError``. Entries written before that point stay in the archive,
    which is still closed cleanly; the partial file is left in place.
    """
    resolver = resolver or DocidResolver(handle)
    raw_field = handle.fields.raw
    output_path = Path(f"{docids_path}{RAW_DUMP_SUFFIX}")
    written = 0
    created = int(time.time())

    with open_read(docids_path) as stream, closing(tarfile.open(output_path, "w:gz")) as archive:
        for docid, ordinal in resolver.resolve_many(_iter_docids(stream, docids_path)):
            raw = handle.stored_fields(ordinal).get(raw_field)
            if raw is None:
                raise NotStoredError("Raw document", docid)

            payload = str(raw).encode("utf-8")
            if prepend_docid:
                payload = _docid_marker(docid) + payload

            entry = tarfile.TarInfo(name=docid)
            entry.size = len(payload)
            entry.mtime = created
            archive.addfile(entry, io.BytesIO(payload))
            written += 1

    return ExportSummary(output_path=str(output_path), document_count=written)
