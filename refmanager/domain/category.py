"""Category aggregate snapshots."""

from dataclasses import dataclass, field

from refmanager.domain.references import Reference
from refmanager.domain.values import EntityId, Title, Version


@dataclass(frozen=True)
class Category:
    """A category with its references in position order.

    The position of a reference is its index in ``references``.
    """

    id: EntityId
    title: Title
    version: Version
    references: tuple[Reference, ...] = field(default_factory=tuple)

    def reference_ids(self) -> list[EntityId]:
        return [ref.id for ref in self.references]

    def positions(self) -> dict[EntityId, int]:
        """Map each reference id to its current position."""
        return {ref.id: index for index, ref in enumerate(self.references)}


@dataclass(frozen=True)
class CategorySummary:
    """One entry of the ordered category list."""

    id: EntityId
    title: Title
