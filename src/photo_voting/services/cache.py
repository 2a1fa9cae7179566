"""Bounded candidate cache."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from photo_voting.domain.candidates import Candidate


class CandidateCache(Protocol):
    """Cache interface for candidates keyed by id."""

    def get(self, candidate_id: UUID) -> Candidate | None:
        """Return a cached candidate if present."""

    def put(self, candidate: Candidate) -> list[UUID]:
        """Store a candidate and return the ids evicted to stay within capacity."""

    def remove(self, candidate_id: UUID) -> None:
        """Drop a candidate from the cache."""

    def clear(self) -> None:
        """Drop every cached candidate."""

    def __contains__(self, candidate_id: object) -> bool:
        """Return True when the candidate is cached."""

    def __len__(self) -> int:
        """Return the number of cached candidates."""


@dataclass
class FifoCandidateCache(CandidateCache):
    """In-memory cache that evicts the oldest-inserted entries first.

    Reads do not refresh an entry's position; re-inserting an id moves it to the
    newest position.
    """

    capacity: int
    _entries: dict[UUID, Candidate]

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("Cache capacity must be positive")
        self.capacity = capacity
        self._entries = {}

    def get(self, candidate_id: UUID) -> Candidate | None:
        """Return a cached candidate without touching its eviction order."""
        return self._entries.get(candidate_id)

    def put(self, candidate: Candidate) -> list[UUID]:
        """Insert a candidate and evict the oldest entries beyond capacity."""
        self._entries.pop(candidate.id, None)
        self._entries[candidate.id] = candidate
        evicted: list[UUID] = []
        while len(self._entries) > self.capacity:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            evicted.append(oldest)
        return evicted

    def remove(self, candidate_id: UUID) -> None:
        """Drop a candidate if present."""
        self._entries.pop(candidate_id, None)

    def clear(self) -> None:
        """Drop every cached candidate."""
        self._entries.clear()

    def ids(self) -> list[UUID]:
        """Return cached ids from oldest to newest."""
        return list(self._entries)

    def __contains__(self, candidate_id: object) -> bool:
        return candidate_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
