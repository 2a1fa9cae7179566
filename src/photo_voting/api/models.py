"""Request models for the HTTP API."""

from pydantic import BaseModel, StrictInt

from photo_voting.domain.candidates import CandidateStatus, Trait


class TraitSelection(BaseModel):
    """Rating for one trait of the current photo."""

    trait: Trait
    value: StrictInt


class StatusUpdate(BaseModel):
    """New lifecycle status for an owned photo."""

    status: CandidateStatus
