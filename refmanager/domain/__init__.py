"""Domain value types, reference variants and aggregate snapshots."""

from refmanager.domain.category import Category, CategorySummary
from refmanager.domain.references import (
    BookReference,
    LinkReference,
    NoteReference,
    Reference,
    ReferenceKind,
)
from refmanager.domain.values import INITIAL_VERSION, ISBN, URL, EntityId, Title, Version

__all__ = [
    "Category",
    "CategorySummary",
    "BookReference",
    "LinkReference",
    "NoteReference",
    "Reference",
    "ReferenceKind",
    "EntityId",
    "Version",
    "INITIAL_VERSION",
    "Title",
    "ISBN",
    "URL",
]
