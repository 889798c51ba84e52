"""Reference schemas."""

from typing import Annotated, Literal, Union

from pydantic import AfterValidator, BaseModel, Field

from refmanager.domain.references import (
    BookReference,
    LinkReference,
    NoteReference,
    Reference,
    ReferenceKind,
)
from refmanager.domain.values import ISBN, URL, Title

TitleField = Annotated[str, AfterValidator(Title)]
ISBNField = Annotated[str, AfterValidator(ISBN)]
URLField = Annotated[str, AfterValidator(URL)]


class BookIn(BaseModel):
    """Book reference payload."""

    kind: Literal["book"]
    title: TitleField
    isbn: ISBNField
    description: str = Field("", max_length=2000)
    starred: bool = False

    def to_domain(self) -> BookReference:
        return BookReference(
            title=self.title, isbn=self.isbn, description=self.description, starred=self.starred
        )


class LinkIn(BaseModel):
    """Link reference payload."""

    kind: Literal["link"]
    title: TitleField
    url: URLField
    description: str = Field("", max_length=2000)
    starred: bool = False

    def to_domain(self) -> LinkReference:
        return LinkReference(
            title=self.title, url=self.url, description=self.description, starred=self.starred
        )


class NoteIn(BaseModel):
    """Note reference payload."""

    kind: Literal["note"]
    title: TitleField
    text: str = ""
    starred: bool = False

    def to_domain(self) -> NoteReference:
        return NoteReference(title=self.title, text=self.text, starred=self.starred)


ReferenceVariant = Union[BookIn, LinkIn, NoteIn]
ReferenceIn = Annotated[ReferenceVariant, Field(discriminator="kind")]


class ReferenceAdd(BaseModel):
    """Add a reference to a category."""

    version: int = Field(..., ge=0)
    reference: ReferenceIn


class ReferenceReorder(BaseModel):
    """Reorder the references of a category."""

    version: int = Field(..., ge=0)
    positions: dict[int, int]


class ReferenceResponse(BaseModel):
    """Reference response."""

    id: int
    kind: ReferenceKind
    title: str
    starred: bool
    position: int | None = None
    isbn: str | None = None
    url: str | None = None
    description: str | None = None
    text: str | None = None

    @classmethod
    def from_domain(cls, reference: Reference, position: int | None = None) -> "ReferenceResponse":
        payload: dict = {}
        if reference.kind is ReferenceKind.BOOK:
            payload = {"isbn": reference.isbn, "description": reference.description}
        elif reference.kind is ReferenceKind.LINK:
            payload = {"url": reference.url, "description": reference.description}
        elif reference.kind is ReferenceKind.NOTE:
            payload = {"text": reference.text}
        return cls(
            id=reference.id,
            kind=reference.kind,
            title=reference.title,
            starred=reference.starred,
            position=position,
            **payload,
        )


class OwnedReferenceResponse(ReferenceResponse):
    """Reference response including its owning category."""

    category_id: int
