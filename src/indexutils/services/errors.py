from __future__ import annotations


class IndexUtilsError(RuntimeError):
    fatal = False


class IndexOpenError(IndexUtilsError):
    fatal = True


class CorruptIndexError(IndexUtilsError):
    fatal = True


class IdentifierNotFoundError(IndexUtilsError):
    def __init__(self, docid: str | int) -> None:
        super().__init__(f"Docid not found: {docid}")
        self.docid = docid


class NotStoredError(IndexUtilsError):
    def __init__(self, what: str, docid: str) -> None:
        super().__init__(f"{what} not stored for docid {docid}")
        self.what = what
        self.docid = docid


class AmbiguousTermError(IndexUtilsError):
    def __init__(self, raw_term: str, parsed: str) -> None:
        super().__init__(f"Term {raw_term!r} does not normalize to a single term (parsed as {parsed})")
        self.raw_term = raw_term


class InputFileError(IndexUtilsError):
    def __init__(self, path: object, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
