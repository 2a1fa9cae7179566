"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from uuid import UUID

from supabase import create_client

from photo_voting.adapters.asset_preloader import AssetPreloader, HttpxAssetPreloader
from photo_voting.adapters.supabase_photo_repository import SupabasePhotoRepository
from photo_voting.adapters.supabase_vote_ledger import SupabaseVoteLedger
from photo_voting.adapters.supabase_voter_repository import SupabaseVoterRepository
from photo_voting.config import Settings
from photo_voting.services.cache import FifoCandidateCache
from photo_voting.services.photos import PhotoService
from photo_voting.services.pool import CandidatePool, CandidateRepository
from photo_voting.services.sessions import VotingSession, VotingSessionRegistry
from photo_voting.services.voters import VoterService
from photo_voting.services.votes import VoteCommitService, VoteLedger


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    photo_service: PhotoService
    voter_service: VoterService
    vote_ledger: VoteLedger
    commit_service: VoteCommitService
    session_registry: VotingSessionRegistry
    close_resources: Callable[[], Awaitable[None]]


def session_factory(
    settings: Settings,
    candidate_repository: CandidateRepository,
    vote_ledger: VoteLedger,
    preloader: AssetPreloader,
    commit_service: VoteCommitService,
) -> Callable[[UUID], VotingSession]:
    """Return a factory that builds an isolated voting session per voter."""

    def build(voter_id: UUID) -> VotingSession:
        pool = CandidatePool(
            voter_id=voter_id,
            candidate_repository=candidate_repository,
            vote_ledger=vote_ledger,
            preloader=preloader,
            cache=FifoCandidateCache(settings.cache_capacity),
            page_size=settings.page_size,
        )
        return VotingSession(
            voter_id=voter_id,
            pool=pool,
            commit_service=commit_service,
            prefetch_threshold=settings.prefetch_threshold,
            min_trait_value=settings.min_trait_value,
            max_trait_value=settings.max_trait_value,
        )

    return build


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    photo_repository = SupabasePhotoRepository(supabase_client)
    voter_repository = SupabaseVoterRepository(supabase_client)
    vote_ledger = SupabaseVoteLedger(supabase_client)
    preloader = HttpxAssetPreloader.create(
        timeout_seconds=resolved_settings.preload_timeout_seconds
    )
    commit_service = VoteCommitService(
        ledger=vote_ledger,
        credit_increment=resolved_settings.credit_increment,
        min_trait_value=resolved_settings.min_trait_value,
        max_trait_value=resolved_settings.max_trait_value,
    )
    session_registry = VotingSessionRegistry(
        factory=session_factory(
            resolved_settings,
            candidate_repository=photo_repository,
            vote_ledger=vote_ledger,
            preloader=preloader,
            commit_service=commit_service,
        )
    )

    async def close_resources() -> None:
        await session_registry.close_all()
        await preloader.close()

    return AppContainer(
        settings=resolved_settings,
        photo_service=PhotoService(photo_repository),
        voter_service=VoterService(voter_repository),
        vote_ledger=vote_ledger,
        commit_service=commit_service,
        session_registry=session_registry,
        close_resources=close_resources,
    )
