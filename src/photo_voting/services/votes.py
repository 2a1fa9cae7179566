"""Vote commit protocol."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from photo_voting.domain.candidates import TRAITS, Trait
from photo_voting.domain.errors import (
    DocumentNotFoundError,
    DuplicateDocumentError,
    TransientStoreError,
)
from photo_voting.domain.ledger import PHOTOS, VOTERS, VOTES, LedgerMutation
from photo_voting.domain.votes import (
    CommitOutcome,
    CommitResult,
    VoteRecord,
    vote_record_key,
)

logger = logging.getLogger(__name__)


class VoteLedger(Protocol):
    """Transactional store interface for vote records."""

    def list_voted_candidate_ids(self, voter_id: UUID) -> set[UUID]:
        """Return ids of every candidate the voter has a vote record for."""

    def get_vote(self, voter_id: UUID, candidate_id: UUID) -> VoteRecord | None:
        """Return the vote record for a (voter, candidate) pair, if present."""

    def apply_batch(self, mutations: list[LedgerMutation]) -> None:
        """Apply every mutation or none of them.

        Raises DocumentNotFoundError, DuplicateDocumentError or
        TransientStoreError; nothing is written when an error is raised.
        """


@dataclass
class VoteCommitService:
    """Records one vote atomically with its credit and counter side effects."""

    ledger: VoteLedger
    credit_increment: int = 1
    min_trait_value: int = 1
    max_trait_value: int = 4

    def commit(
        self,
        candidate_id: UUID,
        voter_id: UUID | None,
        trait_values: Mapping[Trait, int],
        feedback_tags: Iterable[str],
    ) -> CommitResult:
        """Commit a vote and return a discriminated outcome.

        No retries happen here; the caller decides whether to retry based on
        ``CommitResult.retryable``.
        """
        if voter_id is None:
            return CommitResult(
                CommitOutcome.UNAUTHENTICATED, candidate_id, "No voter identity"
            )
        traits = self._validated_traits(trait_values)
        tags = sorted(set(feedback_tags))
        mutations = self.build_mutations(candidate_id, voter_id, traits, tags)

        try:
            self.ledger.apply_batch(mutations)
        except DuplicateDocumentError:
            logger.warning(
                "Duplicate vote ignored",
                extra={"voter_id": str(voter_id), "candidate_id": str(candidate_id)},
            )
            return CommitResult(
                CommitOutcome.DUPLICATE_VOTE, candidate_id, "Vote already recorded"
            )
        except DocumentNotFoundError as exc:
            if exc.collection == VOTERS:
                return CommitResult(
                    CommitOutcome.UNAUTHENTICATED, candidate_id, "Unknown voter"
                )
            logger.info(
                "Candidate vanished before commit",
                extra={"candidate_id": str(candidate_id)},
            )
            return CommitResult(
                CommitOutcome.CANDIDATE_NOT_FOUND,
                candidate_id,
                "Photo no longer exists",
            )
        except TransientStoreError as exc:
            logger.exception(
                "Vote commit failed", extra={"candidate_id": str(candidate_id)}
            )
            return CommitResult(
                CommitOutcome.TRANSIENT_STORE_ERROR, candidate_id, str(exc) or None
            )

        logger.info(
            "photo_vote committed",
            extra={
                "voter_id": str(voter_id),
                "candidate_id": str(candidate_id),
                "traits": {trait.value: value for trait, value in traits.items()},
            },
        )
        return CommitResult(CommitOutcome.COMMITTED, candidate_id)

    def build_mutations(
        self,
        candidate_id: UUID,
        voter_id: UUID,
        traits: Mapping[Trait, int],
        tags: list[str],
    ) -> list[LedgerMutation]:
        """Build the credit, counter and vote-record mutations for one vote."""
        photo_deltas: dict[str, int] = {"total_votes": 1}
        for trait in TRAITS:
            photo_deltas[f"votes_{trait.value}"] = 1
            photo_deltas[f"sum_{trait.value}"] = traits[trait]
        record: dict[str, object] = {
            "voter_id": str(voter_id),
            "photo_id": str(candidate_id),
            "feedback_tags": tags,
            "created_at": datetime.now(tz=UTC).isoformat(),
        }
        record.update({trait.value: traits[trait] for trait in TRAITS})
        return [
            LedgerMutation.increment(
                VOTERS, str(voter_id), {"credits": self.credit_increment}
            ),
            LedgerMutation.increment(PHOTOS, str(candidate_id), photo_deltas),
            LedgerMutation.create(
                VOTES, vote_record_key(voter_id, candidate_id), record
            ),
        ]

    def _validated_traits(self, trait_values: Mapping[Trait, int]) -> dict[Trait, int]:
        missing = [trait.value for trait in TRAITS if trait not in trait_values]
        if missing:
            raise ValueError(f"Missing trait values: {', '.join(missing)}")
        traits: dict[Trait, int] = {}
        for trait in TRAITS:
            value = trait_values[trait]
            if not is_rating(value, self.min_trait_value, self.max_trait_value):
                raise ValueError(
                    f"{trait.value} must be a whole number between "
                    f"{self.min_trait_value} and {self.max_trait_value}"
                )
            traits[trait] = value
        return traits


def is_rating(value: object, low: int, high: int) -> bool:
    """Return True for a plain integer within the rating scale."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return low <= value <= high
