"""Voter-related business logic."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from photo_voting.domain.models import VoterRecord


class VoterRepository(Protocol):
    """Persistence interface for voter data."""

    def get_voter(self, voter_id: UUID) -> VoterRecord | None:
        """Return the voter, if present."""

    def create_voter(self, voter_id: UUID) -> VoterRecord:
        """Create and return a voter with no credits."""


@dataclass
class VoterService:
    """Application service for voter lifecycle actions."""

    repository: VoterRepository

    def ensure_voter(self, voter_id: UUID) -> VoterRecord:
        """Ensure a voter record exists for the identity and return it."""
        existing = self.repository.get_voter(voter_id)
        if existing:
            return existing
        return self.repository.create_voter(voter_id)

    def get_credits(self, voter_id: UUID) -> int:
        """Return the voter's credit balance, zero when unknown."""
        voter = self.repository.get_voter(voter_id)
        return voter.credits if voter else 0
