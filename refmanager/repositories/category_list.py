"""Category list repository.

The ordered list of categories is its own unit of consistency, separate from
any category's references. It has no version field: each operation re-reads
what it needs inside its own transaction and relies on the store to
serialize writers (row locks where the dialect has them, the SQLite database
write lock otherwise).

A reorder validates against the id set read in its own transaction. A
category created or deleted by another caller after the client read the list
makes that client's map fail validation, but nothing tells a client that the
list it reordered differs from the one it displayed.
"""

import logging
from collections.abc import Mapping

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from refmanager.database import transaction
from refmanager.domain.category import Category, CategorySummary
from refmanager.domain.values import INITIAL_VERSION, EntityId, Title
from refmanager.exceptions import ConstraintViolationError, NotFoundError, PositionValidationError
from refmanager.repositories.rows import categories
from refmanager.services.ordering import OrderedScope, apply_positions, compact, next_position
from refmanager.services.positions import validate_positions

logger = logging.getLogger(__name__)

CATEGORY_LIST = OrderedScope(categories)


class CategoryListRepository:
    """Add, delete and reorder categories."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> list[CategorySummary]:
        """Get all categories as (id, title) in list order."""
        with transaction(self.db):
            return self._summaries()

    def add(self, title: Title) -> Category:
        """Create an empty category at the end of the list."""
        with transaction(self.db):
            try:
                category_id = self.db.execute(
                    insert(categories)
                    .values(
                        title=str(title),
                        version=int(INITIAL_VERSION),
                        position=next_position(CATEGORY_LIST),
                    )
                    .returning(categories.c.id)
                ).scalar_one()
            except IntegrityError as e:
                logger.error(f"Store rejected new category {title!r}: {e}")
                raise ConstraintViolationError(f"Could not add category {title!r}") from e

        logger.info(f"Created category {category_id}")
        return Category(id=EntityId(category_id), title=title, version=INITIAL_VERSION)

    def delete(self, category_id: int) -> None:
        """Delete a category with all of its references and close the gap it leaves.

        Raises:
            NotFoundError: If no category has this id
        """
        with transaction(self.db):
            result = self.db.execute(delete(categories).where(categories.c.id == category_id))
            if result.rowcount == 0:
                raise NotFoundError(f"Category {category_id} not found")
            compact(self.db, CATEGORY_LIST)

        logger.info(f"Deleted category {category_id}")

    def reorder(self, positions: Mapping[int, int]) -> list[CategorySummary]:
        """Apply a full permutation of the category list.

        Raises:
            PositionValidationError: If ``positions`` is not a permutation of the current list
        """
        with transaction(self.db):
            # FOR UPDATE is dropped by dialects without row locks (SQLite)
            current_ids = (
                self.db.execute(select(categories.c.id).with_for_update()).scalars().all()
            )
            try:
                validate_positions(current_ids, positions)
            except PositionValidationError as e:
                logger.warning(f"Rejected category reorder: {e}")
                raise

            apply_positions(self.db, CATEGORY_LIST, positions)
            summaries = self._summaries()

        logger.info(f"Reordered {len(summaries)} categories")
        return summaries

    def _summaries(self) -> list[CategorySummary]:
        rows = self.db.execute(
            select(categories.c.id, categories.c.title).order_by(categories.c.position)
        ).all()
        return [CategorySummary(id=EntityId(row.id), title=Title(row.title)) for row in rows]
