"""Voting session state machine."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import UUID

from photo_voting.domain.candidates import TRAITS, Candidate, Trait
from photo_voting.domain.sessions import (
    LoadingState,
    SessionView,
    SubmissionPhase,
)
from photo_voting.domain.votes import FEEDBACK_TAGS, CommitOutcome, CommitResult
from photo_voting.services.pool import CandidatePool
from photo_voting.services.votes import VoteCommitService, is_rating

logger = logging.getLogger(__name__)


@dataclass
class VotingSession:
    """State machine for one voter rating a stream of candidates.

    Mutating operations return True when accepted and False when the current
    state rejects them. Every operation is rejected while a commit is in flight.
    """

    voter_id: UUID
    pool: CandidatePool
    commit_service: VoteCommitService
    prefetch_threshold: int = 3
    min_trait_value: int = 1
    max_trait_value: int = 4
    queue: list[Candidate] = field(default_factory=list)
    index: int = 0
    phase: SubmissionPhase = SubmissionPhase.RATING
    draft: dict[Trait, int] = field(default_factory=dict)
    selected_tags: set[str] = field(default_factory=set)
    error: str | None = None
    _background: set[asyncio.Task[None]] = field(default_factory=set, repr=False)

    @property
    def current(self) -> Candidate | None:
        """Return the candidate being rated, if any."""
        if 0 <= self.index < len(self.queue):
            return self.queue[self.index]
        return None

    @property
    def ready_to_submit(self) -> bool:
        """True when every trait has a value in the draft."""
        return all(trait in self.draft for trait in TRAITS)

    @property
    def unseen(self) -> int:
        """Number of queued candidates from the cursor onwards."""
        return max(len(self.queue) - self.index, 0)

    @property
    def loading_state(self) -> LoadingState:
        """Loading state reported by the candidate pool."""
        return self.pool.loading_state

    @property
    def empty(self) -> bool:
        """True when nothing is left to rate and the last load succeeded."""
        return (
            self.current is None
            and self.pool.loading_state is LoadingState.SUCCESS
            and self.pool.exhausted
        )

    def view(self) -> SessionView:
        """Return a snapshot of the session for presentation."""
        return SessionView(
            loading_state=self.pool.loading_state,
            phase=self.phase,
            current=self.current,
            draft=dict(self.draft),
            ready_to_submit=self.ready_to_submit,
            selected_tags=frozenset(self.selected_tags),
            remaining=self.unseen,
            empty=self.empty,
            error=self.error,
        )

    async def start(self) -> list[Candidate]:
        """Load the first page, replacing anything queued."""
        return await self.refresh()

    async def refresh(self) -> list[Candidate]:
        """Reload from the beginning of the pool; used for manual retry."""
        if self.phase is SubmissionPhase.SUBMITTING:
            return []
        previous = self.current
        loaded = await self.pool.load_next_page(reset=True)
        if self.pool.loading_state is LoadingState.LOADING:
            return []
        if self.pool.loading_state is LoadingState.ERROR:
            self.error = "Couldn't load photos. Please try again."
            return []
        self.error = None
        self.queue = list(loaded)
        self.index = 0
        await self._page_until_available()
        if self.pool.loading_state is LoadingState.ERROR:
            self.error = "Couldn't load photos. Please try again."
        if previous is None or self.current is None or previous.id != self.current.id:
            self._reset_draft()
        self._maybe_prefetch()
        return list(self.queue)

    def select_trait(self, trait: Trait, value: int) -> bool:
        """Record a rating for one trait of the current candidate."""
        if self.phase is SubmissionPhase.SUBMITTING or self.current is None:
            return False
        trait = Trait(trait)
        if not is_rating(value, self.min_trait_value, self.max_trait_value):
            raise ValueError(
                f"Rating must be a whole number between {self.min_trait_value} "
                f"and {self.max_trait_value}"
            )
        self.draft[trait] = value
        return True

    def request_submit(self) -> bool:
        """Move to feedback collection once every trait is rated."""
        if self.phase is SubmissionPhase.FEEDBACK_PENDING:
            return True
        if self.phase is SubmissionPhase.SUBMITTING or not self.ready_to_submit:
            return False
        current = self.current
        if current is None:
            return False
        self.phase = SubmissionPhase.FEEDBACK_PENDING
        logger.info(
            "photo_vote feedback requested",
            extra={
                "candidate_id": str(current.id),
                "traits": {trait.value: value for trait, value in self.draft.items()},
            },
        )
        return True

    def dismiss_feedback(self) -> bool:
        """Close feedback collection and return to rating, keeping the draft."""
        if self.phase is not SubmissionPhase.FEEDBACK_PENDING:
            return False
        self.phase = SubmissionPhase.RATING
        return True

    def toggle_feedback_tag(self, tag: str) -> bool:
        """Add or remove a feedback tag on the pending submission."""
        if self.phase is not SubmissionPhase.FEEDBACK_PENDING:
            return False
        if tag not in FEEDBACK_TAGS:
            raise ValueError(f"Unknown feedback tag: {tag}")
        if tag in self.selected_tags:
            self.selected_tags.discard(tag)
        else:
            self.selected_tags.add(tag)
        return True

    async def confirm_feedback(self) -> CommitResult | None:
        """Commit the pending vote and advance on success.

        Returns None when the current state does not allow a commit.
        """
        current = self.current
        if self.phase is not SubmissionPhase.FEEDBACK_PENDING or current is None:
            return None

        self.phase = SubmissionPhase.SUBMITTING
        try:
            result = await asyncio.to_thread(
                self.commit_service.commit,
                current.id,
                self.voter_id,
                dict(self.draft),
                frozenset(self.selected_tags),
            )
        except Exception:
            logger.exception(
                "Unexpected vote commit failure",
                extra={"candidate_id": str(current.id)},
            )
            self.phase = SubmissionPhase.FEEDBACK_PENDING
            self.error = "Failed to submit feedback. Please try again."
            raise
        except asyncio.CancelledError:
            # The commit may still land; a retry then reports a duplicate.
            self.phase = SubmissionPhase.FEEDBACK_PENDING
            raise

        if result.applied:
            self.error = None
            await self._advance_past(current)
        elif result.outcome is CommitOutcome.CANDIDATE_NOT_FOUND:
            self.error = "That photo is no longer available."
            await self._advance_past(current)
        else:
            self.phase = SubmissionPhase.FEEDBACK_PENDING
            self.error = (
                "Failed to submit feedback. Please try again."
                if result.retryable
                else "You need to sign in again to vote."
            )
        return result

    async def drain(self) -> None:
        """Wait for background page loads and preloads to settle."""
        while self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        await self.pool.drain_preloads()

    async def _advance_past(self, candidate: Candidate) -> None:
        self.pool.forget(candidate.id)
        self._remove_from_queue(candidate.id)
        self._reset_draft()
        await self._page_until_available()
        if self.index >= len(self.queue):
            self.index = 0
        self._maybe_prefetch()

    async def _page_until_available(self) -> None:
        # A page may be entirely filtered out; keep paging until one is not.
        while self.index >= len(self.queue) and self.pool.can_page:
            loaded = await self.pool.load_next_page(reset=False)
            self._append(loaded)
            if loaded:
                return

    def _remove_from_queue(self, candidate_id: UUID) -> None:
        for position, queued in enumerate(self.queue):
            if queued.id == candidate_id:
                del self.queue[position]
                if position < self.index:
                    self.index -= 1
                return

    def _append(self, candidates: list[Candidate]) -> None:
        queued_ids = {candidate.id for candidate in self.queue}
        self.queue.extend(
            candidate for candidate in candidates if candidate.id not in queued_ids
        )

    def _reset_draft(self) -> None:
        self.draft = {}
        self.selected_tags = set()
        self.phase = SubmissionPhase.RATING

    def _maybe_prefetch(self) -> None:
        if not self.pool.should_prefetch(self.unseen, self.prefetch_threshold):
            return
        task = asyncio.create_task(self._prefetch())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _prefetch(self) -> None:
        loaded = await self.pool.load_next_page(reset=False)
        self._append(loaded)
        if self.pool.loading_state is LoadingState.SUCCESS:
            self._maybe_prefetch()


@dataclass
class VotingSessionRegistry:
    """Holds one in-memory voting session per voter."""

    factory: Callable[[UUID], VotingSession]
    sessions: dict[UUID, VotingSession] = field(default_factory=dict)

    def get(self, voter_id: UUID) -> VotingSession | None:
        """Return the voter's session, if one was started."""
        return self.sessions.get(voter_id)

    def open(self, voter_id: UUID) -> VotingSession:
        """Return the voter's session, creating it on first use."""
        session = self.sessions.get(voter_id)
        if session is None:
            session = self.factory(voter_id)
            self.sessions[voter_id] = session
        return session

    async def close_all(self) -> None:
        """Let background work finish and forget every session."""
        for session in self.sessions.values():
            await session.drain()
        self.sessions.clear()
