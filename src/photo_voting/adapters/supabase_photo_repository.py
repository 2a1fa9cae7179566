"""Supabase-backed photo repository."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from photo_voting.domain.candidates import (
    TRAITS,
    Candidate,
    CandidatePage,
    CandidateStatus,
    PageCursor,
)
from photo_voting.services.photos import PhotoRepository
from photo_voting.services.pool import CandidateRepository

logger = logging.getLogger(__name__)

_PHOTO_COLUMNS = ", ".join(
    [
        "id",
        "owner_id",
        "image_url",
        "status",
        "total_votes",
        *(f"sum_{trait.value}" for trait in TRAITS),
        *(f"votes_{trait.value}" for trait in TRAITS),
        "created_at",
        "updated_at",
    ]
)


@dataclass
class SupabasePhotoRepository(CandidateRepository, PhotoRepository):
    """Supabase implementation for photo reads and owner updates."""

    client: Client

    def list_active_candidates(
        self, page_size: int, after: PageCursor | None
    ) -> CandidatePage:
        """Return one page of active photos ordered by (total_votes, id)."""
        query = (
            self.client.table("photos")
            .select(_PHOTO_COLUMNS)
            .eq("status", CandidateStatus.ACTIVE.value)
        )
        if after is not None:
            query = query.or_(
                f"total_votes.gt.{after.total_votes},"
                f"and(total_votes.eq.{after.total_votes},id.gt.{after.candidate_id})"
            )
        response = (
            query.order("total_votes").order("id").limit(page_size).execute()
        )
        rows = response.data or []
        candidates = [
            candidate for candidate in map(_parse_photo, rows) if candidate is not None
        ]
        next_cursor = None
        if rows:
            last = rows[-1]
            next_cursor = PageCursor(
                total_votes=int(last.get("total_votes") or 0),
                candidate_id=UUID(last["id"]),
            )
        return CandidatePage(
            candidates=candidates, next_cursor=next_cursor, raw_count=len(rows)
        )

    def get_photo(self, photo_id: UUID) -> Candidate | None:
        """Return a photo by id, if present."""
        response = (
            self.client.table("photos")
            .select(_PHOTO_COLUMNS)
            .eq("id", str(photo_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_photo(response.data[0])

    def list_photos_by_owner(self, owner_id: UUID) -> list[Candidate]:
        """Return every photo uploaded by an owner."""
        response = (
            self.client.table("photos")
            .select(_PHOTO_COLUMNS)
            .eq("owner_id", str(owner_id))
            .execute()
        )
        return [
            photo
            for photo in map(_parse_photo, response.data or [])
            if photo is not None
        ]

    def update_status(self, photo_id: UUID, status: CandidateStatus) -> None:
        """Set a photo's lifecycle status."""
        self.client.table("photos").update(
            {
                "status": status.value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("id", str(photo_id)).execute()


def _parse_photo(row: dict[str, object]) -> Candidate | None:
    """Build a candidate from a row, or None when the row is malformed."""
    try:
        return Candidate(
            id=UUID(str(row["id"])),
            owner_id=UUID(str(row["owner_id"])),
            image_url=str(row["image_url"]),
            status=CandidateStatus(row["status"]),
            total_votes=int(row.get("total_votes") or 0),
            trait_sums={
                trait: int(row.get(f"sum_{trait.value}") or 0) for trait in TRAITS
            },
            trait_votes={
                trait: int(row.get(f"votes_{trait.value}") or 0) for trait in TRAITS
            },
            created_at=_parse_timestamp(row.get("created_at")),
            updated_at=_parse_timestamp(row.get("updated_at")),
        )
    except (KeyError, TypeError, ValueError):
        logger.warning("Skipping malformed photo row", extra={"row_id": row.get("id")})
        return None


def _parse_timestamp(value: object) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))
