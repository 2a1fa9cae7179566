"""Voting session endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from photo_voting.api.models import TraitSelection  # noqa: TC001
from photo_voting.config import parse_voter_id
from photo_voting.services.photos import summarize

if TYPE_CHECKING:
    from photo_voting.containers import AppContainer
    from photo_voting.domain.sessions import SessionView
    from photo_voting.services.sessions import VotingSession

router = APIRouter(prefix="/voting", tags=["voting"])


async def require_voter(x_voter_id: str | None = Header(default=None)) -> UUID:
    """Resolve the voter identity supplied by the auth layer."""
    voter_id = parse_voter_id(x_voter_id)
    if voter_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return voter_id


def _session(request: Request, voter_id: UUID) -> VotingSession:
    container: AppContainer = request.app.state.container
    session = container.session_registry.get(voter_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No voting session. Start one first.",
        )
    return session


def _rejected(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Cannot {action} right now.",
    )


@router.post("/session")
async def start_session(
    request: Request, voter_id: UUID = Depends(require_voter)
) -> dict[str, object]:
    """Start or restart the voter's session and load the first page."""
    container: AppContainer = request.app.state.container
    container.voter_service.ensure_voter(voter_id)
    session = container.session_registry.open(voter_id)
    await session.start()
    return view_payload(session.view())


@router.get("/session")
async def get_session(
    request: Request, voter_id: UUID = Depends(require_voter)
) -> dict[str, object]:
    """Return the current session view."""
    return view_payload(_session(request, voter_id).view())


@router.put("/session/traits")
async def select_trait(
    selection: TraitSelection,
    request: Request,
    voter_id: UUID = Depends(require_voter),
) -> dict[str, object]:
    """Record a rating for one trait."""
    session = _session(request, voter_id)
    try:
        accepted = session.select_trait(selection.trait, selection.value)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if not accepted:
        raise _rejected("rate this photo")
    return view_payload(session.view())


@router.post("/session/submit")
async def request_submit(
    request: Request, voter_id: UUID = Depends(require_voter)
) -> dict[str, object]:
    """Move to feedback collection once every trait is rated."""
    session = _session(request, voter_id)
    if not session.request_submit():
        raise _rejected("submit")
    return view_payload(session.view())


@router.post("/session/feedback/dismiss")
async def dismiss_feedback(
    request: Request, voter_id: UUID = Depends(require_voter)
) -> dict[str, object]:
    """Return to rating without losing the draft."""
    session = _session(request, voter_id)
    if not session.dismiss_feedback():
        raise _rejected("close feedback")
    return view_payload(session.view())


@router.post("/session/tags/{tag}")
async def toggle_tag(
    tag: str, request: Request, voter_id: UUID = Depends(require_voter)
) -> dict[str, object]:
    """Toggle a feedback tag on the pending vote."""
    session = _session(request, voter_id)
    try:
        accepted = session.toggle_feedback_tag(tag)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if not accepted:
        raise _rejected("change feedback")
    return view_payload(session.view())


@router.post("/session/feedback")
async def confirm_feedback(
    request: Request, voter_id: UUID = Depends(require_voter)
) -> dict[str, object]:
    """Commit the pending vote."""
    session = _session(request, voter_id)
    result = await session.confirm_feedback()
    if result is None:
        raise _rejected("submit feedback")
    return {
        "outcome": result.outcome.value,
        "detail": result.detail,
        "session": view_payload(session.view()),
    }


@router.post("/session/retry")
async def retry(
    request: Request, voter_id: UUID = Depends(require_voter)
) -> dict[str, object]:
    """Reload candidates from the beginning after an error or empty pool."""
    session = _session(request, voter_id)
    await session.refresh()
    return view_payload(session.view())


def view_payload(view: SessionView) -> dict[str, object]:
    """Serialize a session view for JSON responses."""
    return {
        "loading_state": view.loading_state.value,
        "phase": view.phase.value,
        "current": summarize(view.current) if view.current else None,
        "draft": {trait.value: value for trait, value in view.draft.items()},
        "ready_to_submit": view.ready_to_submit,
        "selected_tags": sorted(view.selected_tags),
        "remaining": view.remaining,
        "empty": view.empty,
        "error": view.error,
    }
