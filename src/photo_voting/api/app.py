"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import Depends, FastAPI, HTTPException, Request, status

from photo_voting.api.admin import router as admin_router
from photo_voting.api.models import StatusUpdate
from photo_voting.api.voting import require_voter
from photo_voting.api.voting import router as voting_router
from photo_voting.app_logging import configure_logging
from photo_voting.containers import AppContainer
from photo_voting.services.photos import PhotoOwnershipError, summarize


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(voting_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/voters/me")
    async def current_voter(
        request: Request, voter_id: UUID = Depends(require_voter)
    ) -> dict[str, object]:
        """Return the caller's credit balance."""
        state_container: AppContainer = request.app.state.container
        return {
            "id": str(voter_id),
            "credits": state_container.voter_service.get_credits(voter_id),
        }

    @app.get("/photos/mine")
    async def my_photos(
        request: Request, voter_id: UUID = Depends(require_voter)
    ) -> dict[str, object]:
        """Return the caller's photos with vote statistics."""
        state_container: AppContainer = request.app.state.container
        photos = state_container.photo_service.list_owned(voter_id)
        return {"photos": [summarize(photo) for photo in photos]}

    @app.patch("/photos/{photo_id}/status")
    async def update_photo_status(
        photo_id: UUID,
        update: StatusUpdate,
        request: Request,
        voter_id: UUID = Depends(require_voter),
    ) -> dict[str, object]:
        """Change the lifecycle status of one of the caller's photos."""
        state_container: AppContainer = request.app.state.container
        try:
            photo = state_container.photo_service.update_status(
                voter_id, photo_id, update.status
            )
        except PhotoOwnershipError as exc:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
            ) from exc
        if photo is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        logger.info(
            "Photo status changed",
            extra={"photo_id": str(photo_id), "status": update.status.value},
        )
        return summarize(photo)

    return app
