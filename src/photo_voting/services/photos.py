"""Owner-facing photo operations."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from photo_voting.domain.candidates import TRAITS, Candidate, CandidateStatus


class PhotoRepository(Protocol):
    """Persistence interface for photo metadata."""

    def get_photo(self, photo_id: UUID) -> Candidate | None:
        """Return a photo by id, if present."""

    def list_photos_by_owner(self, owner_id: UUID) -> list[Candidate]:
        """Return every photo uploaded by an owner."""

    def update_status(self, photo_id: UUID, status: CandidateStatus) -> None:
        """Set a photo's lifecycle status."""


class PhotoOwnershipError(PermissionError):
    """Raised when a user changes a photo they do not own."""


@dataclass
class PhotoService:
    """Application service for photo owners."""

    repository: PhotoRepository

    def get_photo(self, photo_id: UUID) -> Candidate | None:
        """Return a photo by id."""
        return self.repository.get_photo(photo_id)

    def list_owned(self, owner_id: UUID) -> list[Candidate]:
        """Return an owner's photos, newest first."""
        photos = self.repository.list_photos_by_owner(owner_id)
        return sorted(
            photos,
            key=lambda photo: photo.created_at.timestamp() if photo.created_at else 0,
            reverse=True,
        )

    def update_status(
        self, owner_id: UUID, photo_id: UUID, status: CandidateStatus
    ) -> Candidate | None:
        """Change the status of a photo owned by the caller.

        An owner runs one test at a time: activating a photo stops whichever
        of their photos is currently active.
        """
        photo = self.repository.get_photo(photo_id)
        if photo is None:
            return None
        if photo.owner_id != owner_id:
            raise PhotoOwnershipError(f"Photo {photo_id} belongs to another user")
        if status is CandidateStatus.ACTIVE:
            for other in self.repository.list_photos_by_owner(owner_id):
                if other.id != photo_id and other.status is CandidateStatus.ACTIVE:
                    self.repository.update_status(other.id, CandidateStatus.INACTIVE)
        self.repository.update_status(photo_id, status)
        return self.repository.get_photo(photo_id)


def summarize(photo: Candidate) -> dict[str, object]:
    """Return a JSON-ready summary of a photo and its vote statistics."""
    return {
        "id": str(photo.id),
        "owner_id": str(photo.owner_id),
        "image_url": photo.image_url,
        "status": photo.status.value,
        "total_votes": photo.total_votes,
        "averages": {trait.value: photo.trait_average(trait) for trait in TRAITS},
        "updated_at": photo.updated_at.isoformat() if photo.updated_at else None,
    }
