from __future__ import annotations

from collections.abc import Iterable, Iterator

from indexutils.services.errors import CorruptIndexError, IdentifierNotFoundError
from indexutils.services.handle import IndexHandle


class DocidResolver:
    """Maps collection docids to index ordinals and back.

    ``resolve_internal`` is a term search on the id field, not a table lookup.
    Ordinals must never be written anywhere that outlives the handle.
    """

    def __init__(self, handle: IndexHandle) -> None:
        self._handle = handle
        self._id_field = handle.fields.id

    def resolve_internal(self, external_id: str) -> int:
        ordinal = self._handle.search_one(self._id_field, external_id)
        if ordinal is None:
            raise IdentifierNotFoundError(external_id)
        return ordinal

    def resolve_external(self, ordinal: int) -> str:
        if not self._handle.is_live(ordinal):
            raise IdentifierNotFoundError(ordinal)

        value = self._handle.stored_fields(ordinal).get(self._id_field)
        if value is None:
            raise CorruptIndexError(
                f"Document {ordinal} has no stored {self._id_field!r} field"
            )
        return str(value)

    def resolve_many(self, external_ids: Iterable[str]) -> Iterator[tuple[str, int]]:
        for external_id in external_ids:
            yield external_id, self.resolve_internal(external_id)
