"""Ordered-list mutations.

The same algorithm maintains the order of the category list and the order of
references within each category. Every function runs inside the caller's
transaction; none of them commits.

Positions in a scope carry a uniqueness constraint, so a permutation is
written in two statements: first every member moves to a unique negative
sentinel ``-(target + 1)``, then to its target. No intermediate state can
collide, whatever order the store visits rows in within one UPDATE.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy import Table, case, func, select, update
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import ColumnElement, ScalarSelect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderedScope:
    """Rows of ``table`` sharing one order.

    ``criteria`` selects the members of the scope (empty for a whole table).
    ``guards`` are extra predicates every write must satisfy, such as the
    owning category's version check.
    """

    table: Table
    criteria: tuple[ColumnElement[bool], ...] = ()
    guards: tuple[ColumnElement[bool], ...] = ()

    @property
    def id_column(self):
        return self.table.c.id

    @property
    def position_column(self):
        return self.table.c.position


def next_position(scope: OrderedScope) -> ScalarSelect:
    """SQL expression for the append slot: ``max(position) + 1``, or 0 when empty.

    Meant to be embedded in the INSERT itself so the max-read and the insert
    are one statement.
    """
    return (
        select(func.coalesce(func.max(scope.position_column) + 1, 0))
        .where(*scope.criteria)
        .correlate(None)
        .scalar_subquery()
    )


def apply_positions(session: Session, scope: OrderedScope, positions: Mapping[int, int]) -> int:
    """Move members to their target positions with the two-phase shift.

    Args:
        session: Session whose transaction the updates join
        scope: Scope the members belong to
        positions: Member id -> target position, already validated

    Returns:
        Number of members updated by both statements. Less than
        ``len(positions)`` means some member or guard did not match.
    """
    if not positions:
        return 0

    member_filter = (
        scope.id_column.in_(list(positions)),
        *scope.criteria,
        *scope.guards,
    )
    sentinels = {member_id: -(target + 1) for member_id, target in positions.items()}

    shifted = session.execute(
        update(scope.table)
        .where(*member_filter)
        .values(position=case(sentinels, value=scope.id_column))
    )
    placed = session.execute(
        update(scope.table)
        .where(*member_filter)
        .values(position=case(dict(positions), value=scope.id_column))
    )
    return min(shifted.rowcount, placed.rowcount)


def compact(session: Session, scope: OrderedScope) -> dict[int, int]:
    """Renumber the remaining members to ``0..n-1``, keeping their relative order.

    Each member's new position is the number of members with a strictly
    smaller current position. Only members whose position changes are written.

    Returns:
        The dense id -> position assignment of the whole scope.
    """
    rows = session.execute(
        select(scope.id_column, scope.position_column)
        .where(*scope.criteria)
        .order_by(scope.position_column)
    ).all()

    dense = {row.id: rank for rank, row in enumerate(rows)}
    moved = {row.id: dense[row.id] for row in rows if row.position != dense[row.id]}
    if moved:
        apply_positions(session, scope, moved)
        logger.debug(f"Compacted {len(moved)} of {len(rows)} rows in {scope.table.name}")
    return dense
