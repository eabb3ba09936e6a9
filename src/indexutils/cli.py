from __future__ import annotations

import argparse
from collections.abc import Callable
from pathlib import Path
import sys

from indexutils.config import get_settings
from indexutils.services.codec import Compression
from indexutils.services.docids import DocidResolver
from indexutils.services.documents import DocumentAccessor
from indexutils.services.errors import IndexUtilsError
from indexutils.services.export import dump_all_docids, dump_raw_documents
from indexutils.services.handle import IndexHandle, open_index
from indexutils.services.terms import TermStatsReader
from indexutils.services.types import IndexFields

PROG = "index-utils"


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Inspect a built index and export the documents stored in it",
    )
    parser.add_argument("--index", required=True, help="Index directory")
    parser.add_argument("--stats", action="store_true", help="Print index statistics")
    parser.add_argument(
        "--print-term-info",
        metavar="TERM",
        help="Print the analyzed form, counts and postings of a term",
    )
    parser.add_argument(
        "--print-docvector",
        metavar="DOCID",
        help="Print the document vector of a document",
    )
    parser.add_argument(
        "--dump-all-docids",
        choices=[compression.value for compression in Compression],
        help=(
            "Write all docids in sorted order using the given compression. Ascending string "
            "docids, or descending numeric ids for corpora indexed with a numeric id field"
        ),
    )
    parser.add_argument(
        "--dump-raw-doc",
        metavar="DOCID",
        help="Print the raw document (if stored in the index)",
    )
    parser.add_argument(
        "--dump-raw-docs",
        metavar="PATH",
        help="Write raw documents for the docids listed in PATH into PATH.output.tar.gz",
    )
    parser.add_argument(
        "--dump-raw-docs-with-docid",
        metavar="PATH",
        help="Same as --dump-raw-docs, prefixing each document with <DOCNO>docid</DOCNO>",
    )
    parser.add_argument(
        "--dump-transformed-doc",
        metavar="DOCID",
        help="Print the transformed document (if stored in the index)",
    )
    parser.add_argument(
        "--dump-sentences",
        metavar="DOCID",
        help="Print the document split into sentences",
    )
    parser.add_argument(
        "--convert-docid-to-ordinal",
        metavar="DOCID",
        help="Convert a collection docid to an index ordinal",
    )
    parser.add_argument(
        "--convert-ordinal-to-docid",
        metavar="ORDINAL",
        type=int,
        help="Convert an index ordinal to a collection docid",
    )
    parser.add_argument(
        "--output-dir",
        default=settings.export_dir,
        help="Directory for the all-docids dump",
    )
    return parser


def _print_stats(handle: IndexHandle) -> None:
    stats = handle.stats()
    print("Index statistics")
    print("----------------")
    print(f"documents:             {stats.documents}")
    print(f"documents (non-empty): {stats.non_empty_documents}")
    print(f"unique terms:          {stats.unique_terms}")
    print(f"total terms:           {stats.total_terms}")
    print("fields:")
    for info in stats.fields:
        print(
            f"  {info.name} (format: {info.format}, indexed: {info.indexed}, "
            f"stored: {info.stored}, hasVectors: {info.has_vectors})"
        )


def _print_term_info(reader: TermStatsReader, raw_term: str) -> None:
    record = reader.lookup(raw_term)
    print(f"raw term:             {record.raw_term}")
    print(f"stemmed term:         {record.normalized}")
    print(f"collection frequency: {record.collection_frequency}")
    print(f"document frequency:   {record.document_frequency}")
    print("postings:")
    for posting in record.postings:
        print(f"\t{posting.ordinal}, {posting.frequency}")


def _print_docvector(documents: DocumentAccessor, docid: str) -> None:
    for term, frequency in documents.get_term_vector(docid):
        print(f"{term} {frequency}")


def _report(message: str) -> None:
    print(f"[{PROG}] {message}", flush=True)


def _requested_operations(
    args: argparse.Namespace,
    handle: IndexHandle,
) -> list[tuple[str, Callable[[], None]]]:
    resolver = DocidResolver(handle)
    documents = DocumentAccessor(handle, resolver=resolver)
    operations: list[tuple[str, Callable[[], None]]] = []

    if args.stats:
        operations.append(("stats", lambda: _print_stats(handle)))

    if args.print_term_info is not None:
        operations.append(
            ("print-term-info", lambda: _print_term_info(TermStatsReader(handle), args.print_term_info))
        )

    if args.print_docvector is not None:
        operations.append(("print-docvector", lambda: _print_docvector(documents, args.print_docvector)))

    if args.dump_all_docids is not None:

        def _dump_all_docids() -> None:
            summary = dump_all_docids(
                handle,
                Compression(args.dump_all_docids),
                output_dir=Path(args.output_dir),
            )
            _report(
                "dump-all-docids completed "
                f"documents={summary.document_count} output_path={summary.output_path}"
            )

        operations.append(("dump-all-docids", _dump_all_docids))

    if args.dump_raw_doc is not None:
        operations.append(("dump-raw-doc", lambda: print(documents.get_raw(args.dump_raw_doc))))

    for name, path, prepend_docid in (
        ("dump-raw-docs", args.dump_raw_docs, False),
        ("dump-raw-docs-with-docid", args.dump_raw_docs_with_docid, True),
    ):
        if path is None:
            continue

        def _dump_raw_docs(path: str = path, prepend_docid: bool = prepend_docid, name: str = name) -> None:
            summary = dump_raw_documents(
                handle,
                Path(path),
                prepend_docid=prepend_docid,
                resolver=resolver,
            )
            _report(
                f"{name} completed documents={summary.document_count} "
                f"output_path={summary.output_path}"
            )

        operations.append((name, _dump_raw_docs))

    if args.dump_transformed_doc is not None:
        operations.append(
            ("dump-transformed-doc", lambda: print(documents.get_transformed(args.dump_transformed_doc)))
        )

    if args.dump_sentences is not None:

        def _dump_sentences() -> None:
            for sentence in documents.get_sentences(args.dump_sentences):
                print(sentence)

        operations.append(("dump-sentences", _dump_sentences))

    if args.convert_docid_to_ordinal is not None:
        operations.append(
            (
                "convert-docid-to-ordinal",
                lambda: print(resolver.resolve_internal(args.convert_docid_to_ordinal)),
            )
        )

    if args.convert_ordinal_to_docid is not None:
        operations.append(
            (
                "convert-ordinal-to-docid",
                lambda: print(resolver.resolve_external(args.convert_ordinal_to_docid)),
            )
        )

    return operations


def run_operations(args: argparse.Namespace, handle: IndexHandle) -> int:
    """Run every requested operation in order and return the number that failed.

    Operations are isolated from each other; only fatal index errors stop the run.
    """
    failures = 0
    for name, operation in _requested_operations(args, handle):
        try:
            operation()
        except IndexUtilsError as exc:
            if exc.fatal:
                raise
            print(f"[{PROG}] {name} failed: {exc}", file=sys.stderr, flush=True)
            failures += 1
        except OSError as exc:
            print(f"[{PROG}] {name} failed: {exc}", file=sys.stderr, flush=True)
            failures += 1
    return failures


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    fields = IndexFields.from_settings(get_settings())

    try:
        with open_index(args.index, fields=fields) as handle:
            failures = run_operations(args, handle)
    except IndexUtilsError as exc:
        print(f"[{PROG}] failed: {exc}", file=sys.stderr, flush=True)
        raise SystemExit(1) from exc

    if failures:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
