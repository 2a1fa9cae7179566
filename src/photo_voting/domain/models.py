"""Domain models for voters."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class VoterRecord:
    """Represents a voter stored in the database."""

    id: UUID
    credits: int
