"""Domain models for candidate photos."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class CandidateStatus(StrEnum):
    """Lifecycle status of a submitted photo."""

    INACTIVE = "Inactive"
    ACTIVE = "Active"
    COMPLETED = "Completed"


class Trait(StrEnum):
    """Rated dimensions of a candidate photo."""

    CONFIDENT = "confident"
    NICE_PERSONALITY = "nice_personality"
    ATTRACTIVE = "attractive"


TRAITS: tuple[Trait, ...] = tuple(Trait)


def _zero_tally() -> dict[Trait, int]:
    return dict.fromkeys(TRAITS, 0)


@dataclass(frozen=True)
class Candidate:
    """A photo submitted for rating by its owner."""

    id: UUID
    owner_id: UUID
    image_url: str
    status: CandidateStatus
    total_votes: int = 0
    trait_sums: dict[Trait, int] = field(default_factory=_zero_tally)
    trait_votes: dict[Trait, int] = field(default_factory=_zero_tally)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def trait_average(self, trait: Trait) -> float | None:
        """Return the mean rating for a trait, or None before the first vote."""
        votes = self.trait_votes.get(trait, 0)
        if votes <= 0:
            return None
        return self.trait_sums.get(trait, 0) / votes


@dataclass(frozen=True)
class PageCursor:
    """Position after the last row of a page ordered by (total_votes, id)."""

    total_votes: int
    candidate_id: UUID


@dataclass(frozen=True)
class CandidatePage:
    """One page of active candidates as returned by the store."""

    candidates: list[Candidate]
    next_cursor: PageCursor | None
    raw_count: int
