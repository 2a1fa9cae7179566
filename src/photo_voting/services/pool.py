"""Candidate pool: paginated, de-duplicated supply of photos to rate."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from photo_voting.adapters.asset_preloader import AssetPreloader
from photo_voting.domain.candidates import (
    Candidate,
    CandidatePage,
    CandidateStatus,
    PageCursor,
)
from photo_voting.domain.sessions import LoadingState
from photo_voting.services.cache import CandidateCache
from photo_voting.services.votes import VoteLedger

logger = logging.getLogger(__name__)


class CandidateRepository(Protocol):
    """Read interface for active candidates."""

    def list_active_candidates(
        self, page_size: int, after: PageCursor | None
    ) -> CandidatePage:
        """Return active candidates ordered by ascending total votes."""


@dataclass
class CandidatePool:
    """Supplies one voter's session with candidates it has not yet rated.

    Page loads never raise: failures are reported through ``loading_state``.
    Only one load runs at a time and overlapping requests are dropped.
    """

    voter_id: UUID
    candidate_repository: CandidateRepository
    vote_ledger: VoteLedger
    preloader: AssetPreloader
    cache: CandidateCache
    page_size: int = 10
    cursor: PageCursor | None = None
    loading_state: LoadingState = LoadingState.IDLE
    exhausted: bool = False
    _preloads: set[asyncio.Task[None]] = field(default_factory=set, repr=False)

    async def load_next_page(self, reset: bool = False) -> list[Candidate]:
        """Fetch the next page and return the candidates that survive filtering."""
        if self.loading_state is LoadingState.LOADING:
            logger.debug(
                "Page load already in flight", extra={"voter_id": str(self.voter_id)}
            )
            return []

        previous_state = self.loading_state
        self.loading_state = LoadingState.LOADING
        if reset:
            self.cursor = None
            self.cache.clear()
            self.exhausted = False

        try:
            voted_ids = await asyncio.to_thread(
                self.vote_ledger.list_voted_candidate_ids, self.voter_id
            )
            page = await asyncio.to_thread(
                self.candidate_repository.list_active_candidates,
                self.page_size,
                self.cursor,
            )
        except Exception:
            logger.exception(
                "Failed to load candidate page",
                extra={"voter_id": str(self.voter_id)},
            )
            self.loading_state = LoadingState.ERROR
            return []
        except asyncio.CancelledError:
            self.loading_state = previous_state
            raise

        survivors: list[Candidate] = []
        for candidate in page.candidates:
            if candidate.status is not CandidateStatus.ACTIVE:
                continue
            if candidate.id in voted_ids or candidate.id in self.cache:
                continue
            evicted = self.cache.put(candidate)
            if evicted:
                logger.debug(
                    "Evicted cached candidates", extra={"evicted": len(evicted)}
                )
            survivors.append(candidate)

        if page.next_cursor is not None:
            self.cursor = page.next_cursor
        self.exhausted = page.raw_count == 0
        self._schedule_preloads(survivors)
        self.loading_state = LoadingState.SUCCESS
        logger.debug(
            "Loaded candidate page",
            extra={
                "voter_id": str(self.voter_id),
                "raw": page.raw_count,
                "survivors": len(survivors),
            },
        )
        return survivors

    @property
    def can_page(self) -> bool:
        """True when the last load succeeded and more rows may follow."""
        return not self.exhausted and self.loading_state is LoadingState.SUCCESS

    def should_prefetch(self, unseen: int, threshold: int) -> bool:
        """Return True when the unseen queue is low enough to fetch ahead."""
        return (
            unseen <= threshold
            and not self.exhausted
            and self.loading_state is not LoadingState.LOADING
        )

    def forget(self, candidate_id: UUID) -> None:
        """Drop a committed or vanished candidate from the cache."""
        self.cache.remove(candidate_id)

    async def drain_preloads(self) -> None:
        """Wait for outstanding preloads to settle."""
        if self._preloads:
            await asyncio.gather(*self._preloads, return_exceptions=True)

    def _schedule_preloads(self, candidates: list[Candidate]) -> None:
        for candidate in candidates:
            task = asyncio.create_task(self._preload(candidate))
            self._preloads.add(task)
            task.add_done_callback(self._preloads.discard)

    async def _preload(self, candidate: Candidate) -> None:
        try:
            await self.preloader.preload(candidate.image_url)
        except Exception:
            logger.warning(
                "Failed to preload candidate image",
                extra={"candidate_id": str(candidate.id)},
                exc_info=True,
            )
            return
        logger.debug("Preloaded candidate", extra={"candidate_id": str(candidate.id)})
