"""Supabase-backed vote ledger."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from photo_voting.domain.candidates import TRAITS
from photo_voting.domain.errors import (
    DocumentNotFoundError,
    DuplicateDocumentError,
    TransientStoreError,
)
from photo_voting.domain.ledger import LedgerMutation, MutationKind
from photo_voting.domain.votes import VoteRecord
from photo_voting.services.votes import VoteLedger

_UNIQUE_VIOLATION = "23505"
_NO_DATA_FOUND = "P0002"


@dataclass
class SupabaseVoteLedger(VoteLedger):
    """Supabase implementation of the transactional vote ledger.

    Batches run inside the ``apply_ledger_batch`` Postgres function so that all
    mutations commit in a single transaction.
    """

    client: Client

    def list_voted_candidate_ids(self, voter_id: UUID) -> set[UUID]:
        """Return ids of photos the voter already rated."""
        try:
            response = (
                self.client.table("votes")
                .select("photo_id")
                .eq("voter_id", str(voter_id))
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise TransientStoreError(str(exc)) from exc
        return {UUID(row["photo_id"]) for row in response.data or []}

    def get_vote(self, voter_id: UUID, candidate_id: UUID) -> VoteRecord | None:
        """Return the vote record for a (voter, photo) pair, if present."""
        response = (
            self.client.table("votes")
            .select("*")
            .eq("voter_id", str(voter_id))
            .eq("photo_id", str(candidate_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return VoteRecord(
            voter_id=UUID(row["voter_id"]),
            candidate_id=UUID(row["photo_id"]),
            traits={trait: int(row[trait.value]) for trait in TRAITS},
            feedback_tags=frozenset(row.get("feedback_tags") or []),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def apply_batch(self, mutations: list[LedgerMutation]) -> None:
        """Apply all mutations in one database transaction."""
        payload = [mutation.to_payload() for mutation in mutations]
        try:
            self.client.rpc("apply_ledger_batch", {"mutations": payload}).execute()
        except APIError as exc:
            raise _translate_error(exc, mutations) from exc
        except httpx.HTTPError as exc:
            raise TransientStoreError(str(exc)) from exc


def _translate_error(exc: APIError, mutations: list[LedgerMutation]) -> Exception:
    """Map a PostgREST error raised by the batch function to a ledger error."""
    if exc.code == _UNIQUE_VIOLATION:
        created = next(
            (m for m in mutations if m.kind is MutationKind.CREATE), None
        )
        if created is None:
            return DuplicateDocumentError("unknown")
        return DuplicateDocumentError(created.collection, created.document_id)
    if exc.code == _NO_DATA_FOUND:
        # The function reports the missing document as "<collection>/<id>".
        target = str(exc.details or exc.message or "")
        collection, _, document_id = target.partition("/")
        return DocumentNotFoundError(collection.strip(), document_id.strip())
    return TransientStoreError(exc.message or str(exc))
