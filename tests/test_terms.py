import pytest

from indexutils.services.errors import AmbiguousTermError
from indexutils.services.handle import IndexHandle
from indexutils.services.terms import TermStatsReader
from indexutils.services.types import Posting


def test_lookup_reports_stemmed_term_counts_and_postings(handle: IndexHandle) -> None:
    record = TermStatsReader(handle).lookup("Dogs")

    assert record.raw_term == "Dogs"
    assert record.field == "contents"
    assert record.normalized == "dog"
    assert record.collection_frequency == 3
    assert record.document_frequency == 2
    assert list(record.postings) == [Posting(ordinal=0, frequency=2), Posting(ordinal=1, frequency=1)]


def test_lookup_of_single_document_term(handle: IndexHandle) -> None:
    record = TermStatsReader(handle).lookup("running")

    assert record.normalized == "run"
    assert record.collection_frequency == 2
    assert record.document_frequency == 1
    assert list(record.postings) == [Posting(ordinal=0, frequency=2)]


def test_absent_term_has_zero_counts_and_no_postings(handle: IndexHandle) -> None:
    record = TermStatsReader(handle).lookup("zebra")

    assert record.collection_frequency == 0
    assert record.document_frequency == 0
    assert list(record.postings) == []


def test_postings_are_consumed_once(handle: IndexHandle) -> None:
    reader = TermStatsReader(handle)
    record = reader.lookup("dogs")

    assert len(list(record.postings)) == 2
    assert list(record.postings) == []
    assert len(list(reader.lookup("dogs").postings)) == 2


@pytest.mark.parametrize("raw_term", ["dogs cats", "", "dogs OR cats"])
def test_input_that_is_not_a_single_term_is_rejected(handle: IndexHandle, raw_term: str) -> None:
    with pytest.raises(AmbiguousTermError):
        TermStatsReader(handle).lookup(raw_term)
