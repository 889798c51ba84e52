"""SQLAlchemy models."""

from refmanager.models.category import Category
from refmanager.models.reference import BookDetails, LinkDetails, NoteDetails, Reference

__all__ = [
    "Category",
    "Reference",
    "BookDetails",
    "LinkDetails",
    "NoteDetails",
]
