from __future__ import annotations

import bz2
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from enum import Enum
import gzip
from pathlib import Path
from typing import BinaryIO
import zipfile

from indexutils.services.errors import InputFileError


class Compression(str, Enum):
    NONE = "none"
    GZ = "gz"
    BZ2 = "bz2"
    ZIP = "zip"

    @property
    def suffix(self) -> str:
        return _SUFFIXES[self]


_SUFFIXES = {
    Compression.NONE: ".txt",
    Compression.GZ: ".gz",
    Compression.BZ2: ".bz2",
    Compression.ZIP: ".zip",
}


def sniff_compression(path: str | Path) -> Compression:
    name = str(path)
    if name.endswith(".bz2"):
        return Compression.BZ2
    if name.endswith(".gz"):
        return Compression.GZ
    if name.endswith(".zip"):
        return Compression.ZIP
    return Compression.NONE


def output_path_for(base: str | Path, compression: Compression) -> Path:
    return Path(f"{base}{compression.suffix}")


@contextmanager
def open_read(path: str | Path, compression: Compression | None = None) -> Iterator[BinaryIO]:
    """Open ``path`` for binary reading, decompressing transparently.

    The scheme is taken from ``compression`` when given, otherwise sniffed from
    the file suffix. Zip archives yield their first member.
    """
    source = Path(path)
    scheme = compression or sniff_compression(source)

    with ExitStack() as stack:
        if scheme is Compression.BZ2:
            stream = stack.enter_context(bz2.open(source, "rb"))
        elif scheme is Compression.GZ:
            stream = stack.enter_context(gzip.open(source, "rb"))
        elif scheme is Compression.ZIP:
            try:
                archive = stack.enter_context(zipfile.ZipFile(source, "r"))
            except zipfile.BadZipFile as exc:
                raise InputFileError(source, "not a zip archive") from exc
            members = [info for info in archive.infolist() if not info.is_dir()]
            if not members:
                raise InputFileError(source, "zip archive has no members")
            stream = stack.enter_context(archive.open(members[0], "r"))
        else:
            stream = stack.enter_context(source.open("rb"))
        yield stream


@contextmanager
def open_write(base: str | Path, compression: Compression) -> Iterator[BinaryIO]:
    """Open ``base`` plus the scheme's suffix for binary writing.

    Zip output gets a single member named after the base file name, opened
    before any payload is written and always carrying ZIP64 size fields.
    """
    target = output_path_for(base, compression)

    with ExitStack() as stack:
        if compression is Compression.BZ2:
            sink = stack.enter_context(bz2.open(target, "wb"))
        elif compression is Compression.GZ:
            sink = stack.enter_context(gzip.open(target, "wb"))
        elif compression is Compression.ZIP:
            archive = stack.enter_context(
                zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED)
            )
            sink = stack.enter_context(archive.open(Path(str(base)).name, "w", force_zip64=True))
        else:
            sink = stack.enter_context(target.open("wb"))
        yield sink
