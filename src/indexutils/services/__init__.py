from indexutils.services.codec import Compression, open_read, open_write
from indexutils.services.docids import DocidResolver
from indexutils.services.documents import DocumentAccessor
from indexutils.services.export import TieBreak, dump_all_docids, dump_raw_documents
from indexutils.services.handle import IndexHandle, open_index
from indexutils.services.terms import TermStatsReader
from indexutils.services.types import ExportSummary, IndexFields, IndexStats, TermRecord

__all__ = [
    "Compression",
    "DocidResolver",
    "DocumentAccessor",
    "ExportSummary",
    "IndexFields",
    "IndexHandle",
    "IndexStats",
    "TermRecord",
    "TermStatsReader",
    "TieBreak",
    "dump_all_docids",
    "dump_raw_documents",
    "open_index",
    "open_read",
    "open_write",
]
