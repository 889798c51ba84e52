"""Translation between reference rows and reference variants.

Persistence dispatches on ``ReferenceKind`` in exactly two places: building a
variant from a joined row, and choosing the payload table and values for a
variant. Both raise on a kind they do not know.
"""

from typing import Any

from sqlalchemy import Select, Table, case, select

from refmanager.domain.references import (
    BookReference,
    LinkReference,
    NoteReference,
    Reference,
    ReferenceKind,
)
from refmanager.domain.values import ISBN, URL, EntityId, Title
from refmanager.models import BookDetails, Category, LinkDetails, NoteDetails
from refmanager.models import Reference as ReferenceRow

categories: Table = Category.__table__
base_references: Table = ReferenceRow.__table__
book_references: Table = BookDetails.__table__
link_references: Table = LinkDetails.__table__
note_references: Table = NoteDetails.__table__

PAYLOAD_TABLES: dict[ReferenceKind, Table] = {
    ReferenceKind.BOOK: book_references,
    ReferenceKind.LINK: link_references,
    ReferenceKind.NOTE: note_references,
}

reference_kind = case(
    (book_references.c.reference_id.is_not(None), ReferenceKind.BOOK.value),
    (link_references.c.reference_id.is_not(None), ReferenceKind.LINK.value),
    (note_references.c.reference_id.is_not(None), ReferenceKind.NOTE.value),
).label("kind")

REFERENCE_COLUMNS = (
    base_references.c.id.label("ref_id"),
    base_references.c.title.label("ref_title"),
    base_references.c.starred.label("ref_starred"),
    base_references.c.position.label("ref_position"),
    reference_kind,
    book_references.c.isbn,
    book_references.c.description.label("book_description"),
    link_references.c.url,
    link_references.c.description.label("link_description"),
    note_references.c.text,
)


def outerjoin_payloads(from_clause):
    """Join every payload table onto ``from_clause`` (which must include base_references)."""
    return (
        from_clause.outerjoin(
            book_references, book_references.c.reference_id == base_references.c.id
        )
        .outerjoin(link_references, link_references.c.reference_id == base_references.c.id)
        .outerjoin(note_references, note_references.c.reference_id == base_references.c.id)
    )


def select_reference(reference_id: int) -> Select:
    """Query for one reference with its owning category id."""
    return (
        select(base_references.c.category_id, *REFERENCE_COLUMNS)
        .select_from(outerjoin_payloads(base_references))
        .where(base_references.c.id == reference_id)
    )


def reference_from_row(row: Any) -> Reference:
    """Build the variant a joined row describes."""
    if row.kind is None:
        raise ValueError(f"reference {row.ref_id} has no payload row")

    kind = ReferenceKind(row.kind)
    base = {
        "id": EntityId(row.ref_id),
        "title": Title(row.ref_title),
        "starred": bool(row.ref_starred),
    }
    if kind is ReferenceKind.BOOK:
        return BookReference(isbn=ISBN(row.isbn), description=row.book_description or "", **base)
    if kind is ReferenceKind.LINK:
        return LinkReference(url=URL(row.url), description=row.link_description or "", **base)
    if kind is ReferenceKind.NOTE:
        return NoteReference(text=row.text or "", **base)
    raise ValueError(f"unsupported reference kind {kind!r}")


def payload_values(reference: Reference) -> tuple[Table, dict[str, Any]]:
    """Payload table and column values for a variant."""
    if reference.kind is ReferenceKind.BOOK:
        values = {"isbn": str(reference.isbn), "description": reference.description}
    elif reference.kind is ReferenceKind.LINK:
        values = {"url": str(reference.url), "description": reference.description}
    elif reference.kind is ReferenceKind.NOTE:
        values = {"text": reference.text}
    else:
        raise ValueError(f"unsupported reference kind {reference.kind!r}")
    return PAYLOAD_TABLES[reference.kind], values
