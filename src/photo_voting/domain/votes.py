"""Domain models for votes and commit outcomes."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from photo_voting.domain.candidates import Trait

POSITIVE_FEEDBACK_TAGS: tuple[str, ...] = ("Helpful", "Clear", "Accurate", "Concise")
NEGATIVE_FEEDBACK_TAGS: tuple[str, ...] = (
    "Distracting Background",
    "Poor Lighting",
    "Blurry Image",
    "Inappropriate Content",
    "Poor Quality",
    "Bad Composition",
    "Unflattering Angle",
    "Too Much Editing",
    "Not Clear Subject",
    "Other",
)
FEEDBACK_TAGS: frozenset[str] = frozenset(
    POSITIVE_FEEDBACK_TAGS + NEGATIVE_FEEDBACK_TAGS
)


@dataclass(frozen=True)
class VoteRecord:
    """Immutable receipt of one voter's rating of one candidate."""

    voter_id: UUID
    candidate_id: UUID
    traits: dict[Trait, int]
    feedback_tags: frozenset[str]
    created_at: datetime


def vote_record_key(voter_id: UUID, candidate_id: UUID) -> str:
    """Return the document key that makes a vote unique per (voter, candidate)."""
    return f"{voter_id}:{candidate_id}"


class CommitOutcome(StrEnum):
    """Discriminator for the result of a vote commit."""

    COMMITTED = "committed"
    CANDIDATE_NOT_FOUND = "candidate_not_found"
    DUPLICATE_VOTE = "duplicate_vote"
    TRANSIENT_STORE_ERROR = "transient_store_error"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class CommitResult:
    """Outcome of a vote commit attempt."""

    outcome: CommitOutcome
    candidate_id: UUID
    detail: str | None = None

    @property
    def applied(self) -> bool:
        """True when the vote is durably recorded, by this attempt or an earlier one."""
        return self.outcome in {CommitOutcome.COMMITTED, CommitOutcome.DUPLICATE_VOTE}

    @property
    def retryable(self) -> bool:
        """True when the caller may retry with the same draft."""
        return self.outcome is CommitOutcome.TRANSIENT_STORE_ERROR
