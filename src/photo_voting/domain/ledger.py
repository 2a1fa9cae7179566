"""Document mutations applied atomically by the vote ledger."""

from dataclasses import dataclass
from enum import StrEnum

VOTERS = "users"
PHOTOS = "photos"
VOTES = "votes"


class MutationKind(StrEnum):
    """Kinds of document mutation a ledger batch supports."""

    INCREMENT = "increment"
    CREATE = "create"


@dataclass(frozen=True)
class LedgerMutation:
    """One (document, mutation) pair of an atomic batch.

    ``INCREMENT`` adds integer deltas to fields of an existing document and fails
    the batch when the document is missing. ``CREATE`` inserts a new document and
    fails the batch when one already exists under the same key.
    """

    collection: str
    document_id: str
    kind: MutationKind
    fields: dict[str, object]

    @classmethod
    def increment(
        cls, collection: str, document_id: str, deltas: dict[str, int]
    ) -> "LedgerMutation":
        """Build an increment mutation."""
        return cls(collection, document_id, MutationKind.INCREMENT, dict(deltas))

    @classmethod
    def create(
        cls, collection: str, document_id: str, document: dict[str, object]
    ) -> "LedgerMutation":
        """Build a create-if-absent mutation."""
        return cls(collection, document_id, MutationKind.CREATE, dict(document))

    def to_payload(self) -> dict[str, object]:
        """Serialize the mutation for the store."""
        return {
            "collection": self.collection,
            "document_id": self.document_id,
            "kind": self.kind.value,
            "fields": self.fields,
        }
