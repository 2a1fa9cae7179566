"""Domain models for voting sessions."""

from dataclasses import dataclass
from enum import StrEnum

from photo_voting.domain.candidates import Candidate, Trait


class LoadingState(StrEnum):
    """Candidate loading lifecycle."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class SubmissionPhase(StrEnum):
    """Submission lifecycle of the candidate being rated."""

    RATING = "rating"
    FEEDBACK_PENDING = "feedback_pending"
    SUBMITTING = "submitting"


@dataclass(frozen=True)
class SessionView:
    """Read-only snapshot of a voting session for presentation."""

    loading_state: LoadingState
    phase: SubmissionPhase
    current: Candidate | None
    draft: dict[Trait, int]
    ready_to_submit: bool
    selected_tags: frozenset[str]
    remaining: int
    empty: bool
    error: str | None
