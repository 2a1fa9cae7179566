"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from photo_voting.services.photos import summarize

if TYPE_CHECKING:
    from photo_voting.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/photos/{photo_id}", dependencies=[Depends(require_admin)])
async def photo_detail(photo_id: UUID, request: Request) -> dict[str, object]:
    """Return a photo with its vote counters."""
    container: AppContainer = request.app.state.container
    photo = container.photo_service.get_photo(photo_id)
    if photo is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    summary = summarize(photo)
    summary["trait_votes"] = {
        trait.value: count for trait, count in photo.trait_votes.items()
    }
    return summary


@router.get("/voters/{voter_id}", dependencies=[Depends(require_admin)])
async def voter_detail(voter_id: UUID, request: Request) -> dict[str, object]:
    """Return a voter's credit balance and number of recorded votes."""
    container: AppContainer = request.app.state.container
    voted = container.vote_ledger.list_voted_candidate_ids(voter_id)
    return {
        "id": str(voter_id),
        "credits": container.voter_service.get_credits(voter_id),
        "votes": len(voted),
    }


@router.get(
    "/votes/{voter_id}/{photo_id}", dependencies=[Depends(require_admin)]
)
async def vote_detail(
    voter_id: UUID, photo_id: UUID, request: Request
) -> dict[str, object]:
    """Return the vote record for a (voter, photo) pair."""
    container: AppContainer = request.app.state.container
    record = container.vote_ledger.get_vote(voter_id, photo_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {
        "voter_id": str(record.voter_id),
        "photo_id": str(record.candidate_id),
        "traits": {trait.value: value for trait, value in record.traits.items()},
        "feedback_tags": sorted(record.feedback_tags),
        "created_at": record.created_at.isoformat(),
    }
