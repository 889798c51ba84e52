"""Category aggregate repository.

A category row and its references form one unit of consistency, gated by the
category's ``version``. Every mutation takes the version the caller last read
and runs as a single transaction ending in the version-commit step::

    UPDATE categories SET version = version + 1 WHERE id = ? AND version = ?

Zero rows at any guarded step aborts the transaction with
``VersionConflictError``; nothing is left half-applied.
"""

import logging
from collections.abc import Mapping

from sqlalchemy import delete, exists, insert, literal, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from refmanager.database import transaction
from refmanager.domain.category import Category
from refmanager.domain.references import Reference
from refmanager.domain.values import EntityId, Title, Version
from refmanager.exceptions import (
    ConstraintViolationError,
    NotFoundError,
    PositionValidationError,
    VersionConflictError,
)
from refmanager.repositories.rows import (
    REFERENCE_COLUMNS,
    base_references,
    categories,
    outerjoin_payloads,
    payload_values,
    reference_from_row,
)
from refmanager.services.ordering import OrderedScope, apply_positions, compact, next_position
from refmanager.services.positions import validate_positions

logger = logging.getLogger(__name__)


class CategoryRepository:
    """Version-gated operations on a single category and its references."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, category_id: int) -> Category:
        """Get a category with its references in position order.

        Raises:
            NotFoundError: If no category has this id
        """
        with transaction(self.db):
            return self._load(category_id)

    def update_title(self, category_id: int, title: Title, version: Version) -> Category:
        """Rename a category.

        Not-found and stale version are both reported as ``VersionConflictError``.
        """
        with transaction(self.db):
            result = self.db.execute(
                update(categories)
                .where(categories.c.id == category_id, categories.c.version == version)
                .values(title=str(title), version=categories.c.version + 1)
            )
            if result.rowcount == 0:
                raise self._conflict(category_id, version)
            category = self._load(category_id)

        logger.info(f"Renamed category {category_id} (version {category.version})")
        return category

    def add_reference(self, category_id: int, reference: Reference, version: Version) -> Category:
        """Append a reference to the end of a category.

        The base row takes the next free position in the same INSERT that
        checks the version; the variant payload is inserted under the same
        version predicate.
        """
        with transaction(self.db):
            try:
                reference_id = self.db.execute(
                    insert(base_references)
                    .from_select(
                        ["category_id", "title", "starred", "position"],
                        select(
                            categories.c.id,
                            literal(str(reference.title)),
                            literal(bool(reference.starred)),
                            next_position(self._scope(category_id)),
                        ).where(categories.c.id == category_id, categories.c.version == version),
                    )
                    .returning(base_references.c.id)
                ).scalar_one_or_none()
                if reference_id is None:
                    raise self._conflict(category_id, version)

                payload_table, values = payload_values(reference)
                inserted = self.db.execute(
                    insert(payload_table).from_select(
                        ["reference_id", *values],
                        select(
                            literal(reference_id), *(literal(value) for value in values.values())
                        ).where(self._version_matches(category_id, version)),
                    )
                )
                if inserted.rowcount == 0:
                    raise self._conflict(category_id, version)

                self._commit_version(category_id, version)
            except IntegrityError as e:
                logger.error(f"Store rejected new reference in category {category_id}: {e}")
                raise ConstraintViolationError(
                    f"Could not add reference to category {category_id}"
                ) from e
            category = self._load(category_id)

        logger.info(
            f"Added {reference.kind.value} reference {reference_id} to category {category_id} "
            f"(version {category.version})"
        )
        return category

    def remove_reference(
        self, category_id: int, reference_id: int, version: Version
    ) -> Category:
        """Delete a reference and close the gap it leaves in the category order.

        Raises:
            VersionConflictError: If the category is missing or its version is stale
            NotFoundError: If the version matches but the reference is not in the category
        """
        with transaction(self.db):
            result = self.db.execute(
                delete(base_references).where(
                    base_references.c.id == reference_id,
                    base_references.c.category_id == category_id,
                    self._version_matches(category_id, version),
                )
            )
            if result.rowcount == 0:
                if self._stored_version(category_id) == version:
                    raise NotFoundError(
                        f"Reference {reference_id} not found in category {category_id}"
                    )
                raise self._conflict(category_id, version)

            compact(self.db, self._scope(category_id, version))
            self._commit_version(category_id, version)
            category = self._load(category_id)

        logger.info(
            f"Removed reference {reference_id} from category {category_id} "
            f"(version {category.version})"
        )
        return category

    def reorder_references(
        self, category_id: int, positions: Mapping[int, int], version: Version
    ) -> Category:
        """Apply a full permutation of a category's references.

        ``positions`` must map every current reference id to a distinct
        position in ``0..n-1``. The identity permutation is accepted and
        still increments the version.

        Raises:
            NotFoundError: If no category has this id
            PositionValidationError: If ``positions`` is not a valid permutation
            VersionConflictError: If the version is stale
        """
        with transaction(self.db):
            if self._stored_version(category_id) is None:
                raise NotFoundError(f"Category {category_id} not found")

            current_ids = (
                self.db.execute(
                    select(base_references.c.id).where(
                        base_references.c.category_id == category_id
                    )
                )
                .scalars()
                .all()
            )
            try:
                validate_positions(current_ids, positions)
            except PositionValidationError as e:
                logger.warning(f"Rejected reorder of category {category_id}: {e}")
                raise

            updated = apply_positions(self.db, self._scope(category_id, version), positions)
            if updated < len(positions):
                raise self._conflict(category_id, version)

            self._commit_version(category_id, version)
            category = self._load(category_id)

        logger.info(f"Reordered category {category_id} (version {category.version})")
        return category

    def _load(self, category_id: int) -> Category:
        rows = self.db.execute(
            select(categories.c.id, categories.c.title, categories.c.version, *REFERENCE_COLUMNS)
            .select_from(
                outerjoin_payloads(
                    categories.outerjoin(
                        base_references, base_references.c.category_id == categories.c.id
                    )
                )
            )
            .where(categories.c.id == category_id)
            .order_by(base_references.c.position)
        ).all()
        if not rows:
            raise NotFoundError(f"Category {category_id} not found")

        first = rows[0]
        return Category(
            id=EntityId(first.id),
            title=Title(first.title),
            version=Version(first.version),
            references=tuple(reference_from_row(row) for row in rows if row.ref_id is not None),
        )

    def _scope(self, category_id: int, version: Version | None = None) -> OrderedScope:
        guards = (self._version_matches(category_id, version),) if version is not None else ()
        return OrderedScope(
            base_references,
            criteria=(base_references.c.category_id == category_id,),
            guards=guards,
        )

    def _version_matches(self, category_id: int, version: Version):
        return exists().where(categories.c.id == category_id, categories.c.version == version)

    def _stored_version(self, category_id: int) -> int | None:
        return self.db.execute(
            select(categories.c.version).where(categories.c.id == category_id)
        ).scalar_one_or_none()

    def _commit_version(self, category_id: int, version: Version) -> None:
        result = self.db.execute(
            update(categories)
            .where(categories.c.id == category_id, categories.c.version == version)
            .values(version=categories.c.version + 1)
        )
        if result.rowcount == 0:
            raise self._conflict(category_id, version)

    def _conflict(self, category_id: int, version: Version) -> VersionConflictError:
        logger.warning(f"Version conflict on category {category_id} (version {version})")
        return VersionConflictError(category_id, version)
