"""Reference content repository.

Edits to a single reference's content (title, starred flag, variant payload)
do not touch its category, its position or the category version, so they run
without the aggregate's version gate.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import update
from sqlalchemy.orm import Session

from refmanager.database import transaction
from refmanager.domain.references import Reference
from refmanager.domain.values import EntityId
from refmanager.exceptions import NotFoundError, ValidationFailure
from refmanager.repositories.rows import (
    base_references,
    payload_values,
    reference_from_row,
    select_reference,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnedReference:
    """A reference together with the category that owns it."""

    category_id: EntityId
    reference: Reference


class ReferenceRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, reference_id: int) -> OwnedReference:
        with transaction(self.db):
            return self._load(reference_id)

    def update(self, reference_id: int, reference: Reference) -> OwnedReference:
        """Replace a reference's title, starred flag and payload.

        Raises:
            NotFoundError: If no reference has this id
            ValidationFailure: If ``reference`` is a different variant than the stored one
        """
        with transaction(self.db):
            stored = self._load(reference_id)
            if stored.reference.kind is not reference.kind:
                raise ValidationFailure(
                    f"Reference {reference_id} is a {stored.reference.kind.value}, "
                    f"not a {reference.kind.value}"
                )

            self.db.execute(
                update(base_references)
                .where(base_references.c.id == reference_id)
                .values(title=str(reference.title), starred=bool(reference.starred))
            )
            payload_table, values = payload_values(reference)
            self.db.execute(
                update(payload_table)
                .where(payload_table.c.reference_id == reference_id)
                .values(**values)
            )
            updated = self._load(reference_id)

        logger.info(f"Updated {reference.kind.value} reference {reference_id}")
        return updated

    def _load(self, reference_id: int) -> OwnedReference:
        row = self.db.execute(select_reference(reference_id)).one_or_none()
        if row is None:
            raise NotFoundError(f"Reference {reference_id} not found")
        return OwnedReference(
            category_id=EntityId(row.category_id), reference=reference_from_row(row)
        )
