"""Reference models.

Base fields live in ``base_references``; each variant keeps its payload in
its own table keyed by the base reference id.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint

from refmanager.database import Base


class Reference(Base):
    """Base reference row, positioned within its owning category."""

    __tablename__ = "base_references"
    __table_args__ = (
        UniqueConstraint("category_id", "position", name="uq_base_references_category_position"),
    )

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    starred = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False)


class BookDetails(Base):
    """Book payload."""

    __tablename__ = "book_references"

    reference_id = Column(
        Integer, ForeignKey("base_references.id", ondelete="CASCADE"), primary_key=True
    )
    isbn = Column(String(50), nullable=False)
    description = Column(Text, nullable=False, default="")


class LinkDetails(Base):
    """Link payload."""

    __tablename__ = "link_references"

    reference_id = Column(
        Integer, ForeignKey("base_references.id", ondelete="CASCADE"), primary_key=True
    )
    url = Column(String(2048), nullable=False)
    description = Column(Text, nullable=False, default="")


class NoteDetails(Base):
    """Note payload."""

    __tablename__ = "note_references"

    reference_id = Column(
        Integer, ForeignKey("base_references.id", ondelete="CASCADE"), primary_key=True
    )
    text = Column(Text, nullable=False, default="")
