"""Supabase-backed voter repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from photo_voting.domain.models import VoterRecord
from photo_voting.services.voters import VoterRepository


@dataclass
class SupabaseVoterRepository(VoterRepository):
    """Supabase implementation for voter persistence."""

    client: Client

    def get_voter(self, voter_id: UUID) -> VoterRecord | None:
        """Return the voter, if present."""
        response = (
            self.client.table("users")
            .select("id, credits")
            .eq("id", str(voter_id))
            .limit(1)
            .execute()
        )
        if response.data:
            row = response.data[0]
            return VoterRecord(id=UUID(row["id"]), credits=int(row["credits"] or 0))
        return None

    def create_voter(self, voter_id: UUID) -> VoterRecord:
        """Create a voter row and return it."""
        response = (
            self.client.table("users")
            .upsert({"id": str(voter_id)}, on_conflict="id", ignore_duplicates=True)
            .execute()
        )
        if response.data:
            row = response.data[0]
            return VoterRecord(id=UUID(row["id"]), credits=int(row["credits"] or 0))
        existing = self.get_voter(voter_id)
        if existing is None:
            raise RuntimeError("Failed to create voter in Supabase")
        return existing
