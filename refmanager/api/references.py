"""Reference API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends

from refmanager.api.dependencies import get_reference_repository
from refmanager.repositories.references import OwnedReference, ReferenceRepository
from refmanager.schemas.reference import (
    OwnedReferenceResponse,
    ReferenceResponse,
    ReferenceVariant,
)

router = APIRouter(prefix="/api/v1", tags=["references"])


def to_response(owned: OwnedReference) -> OwnedReferenceResponse:
    reference = ReferenceResponse.from_domain(owned.reference)
    return OwnedReferenceResponse(category_id=owned.category_id, **reference.model_dump())


@router.get("/references/{reference_id}", response_model=OwnedReferenceResponse)
def get_reference(
    reference_id: int,
    repo: Annotated[ReferenceRepository, Depends(get_reference_repository)],
):
    """Get a single reference."""
    return to_response(repo.get(reference_id))


@router.put("/references/{reference_id}", response_model=OwnedReferenceResponse)
def update_reference(
    reference_id: int,
    reference_data: Annotated[ReferenceVariant, Body()],
    repo: Annotated[ReferenceRepository, Depends(get_reference_repository)],
):
    """Update a reference's title, starred flag and content."""
    return to_response(repo.update(reference_id, reference_data.to_domain()))
