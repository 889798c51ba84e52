"""Reference variants.

A reference is a tagged union: every variant shares the base fields and
declares its discriminant in ``kind``. Code that needs variant-specific
behaviour dispatches on ``kind`` rather than on the class hierarchy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from refmanager.domain.values import ISBN, URL, EntityId, Title


class ReferenceKind(str, Enum):
    """Discriminant of the reference variants."""

    BOOK = "book"
    LINK = "link"
    NOTE = "note"


@dataclass(frozen=True, kw_only=True)
class BookReference:
    kind: ClassVar[ReferenceKind] = ReferenceKind.BOOK

    title: Title
    isbn: ISBN
    description: str = ""
    starred: bool = False
    id: EntityId | None = None


@dataclass(frozen=True, kw_only=True)
class LinkReference:
    kind: ClassVar[ReferenceKind] = ReferenceKind.LINK

    title: Title
    url: URL
    description: str = ""
    starred: bool = False
    id: EntityId | None = None


@dataclass(frozen=True, kw_only=True)
class NoteReference:
    kind: ClassVar[ReferenceKind] = ReferenceKind.NOTE

    title: Title
    text: str = ""
    starred: bool = False
    id: EntityId | None = None


Reference = Union[BookReference, LinkReference, NoteReference]
