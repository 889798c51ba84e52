"""Position map validation shared by the category list and category references."""

from collections.abc import Collection, Mapping

from refmanager.exceptions import PositionErrorReason, PositionValidationError


def validate_positions(ids: Collection[int], positions: Mapping[int, int]) -> None:
    """Check that ``positions`` is a permutation of ``0..n-1`` over ``ids``.

    Succeeds iff ``positions`` has exactly one entry for every id in ``ids``,
    no entry for any other id, and its values are exactly ``{0, ..., n-1}``.

    A map with more than n entries is reported as a wrong count, a foreign
    id as unknown, and a map with too few entries names the first member it
    leaves out.

    Raises:
        PositionValidationError: with a ``reason`` naming the first problem found.
    """
    members = set(ids)
    n = len(members)

    if len(positions) > n:
        raise PositionValidationError(
            PositionErrorReason.WRONG_COUNT,
            f"positions map must have exactly {n} entries, got {len(positions)}",
        )

    for member_id in positions:
        if member_id not in members:
            raise PositionValidationError(
                PositionErrorReason.UNKNOWN_ID, f"invalid id {member_id}: not a member"
            )

    seen: set[int] = set()
    for member_id in sorted(members):
        if member_id not in positions:
            raise PositionValidationError(
                PositionErrorReason.MISSING_ID, f"missing position for id {member_id}"
            )
        position = positions[member_id]
        if isinstance(position, bool) or not isinstance(position, int) or not 0 <= position < n:
            raise PositionValidationError(
                PositionErrorReason.INVALID_POSITION,
                f"invalid position {position!r} for id {member_id}",
            )
        if position in seen:
            raise PositionValidationError(
                PositionErrorReason.DUPLICATE_POSITION, f"duplicate position {position}"
            )
        seen.add(position)
