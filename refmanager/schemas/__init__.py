"""Pydantic schemas for API requests and responses."""

from refmanager.schemas.category import (
    CategoryCreate,
    CategoryReorder,
    CategoryResponse,
    CategorySummaryResponse,
    CategoryUpdate,
)
from refmanager.schemas.reference import (
    BookIn,
    LinkIn,
    NoteIn,
    OwnedReferenceResponse,
    ReferenceAdd,
    ReferenceIn,
    ReferenceReorder,
    ReferenceResponse,
    ReferenceVariant,
)

__all__ = [
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryReorder",
    "CategoryResponse",
    "CategorySummaryResponse",
    "BookIn",
    "LinkIn",
    "NoteIn",
    "ReferenceIn",
    "ReferenceVariant",
    "ReferenceAdd",
    "ReferenceReorder",
    "ReferenceResponse",
    "OwnedReferenceResponse",
]
