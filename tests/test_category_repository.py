"""Tests for the category aggregate repository."""

import threading

import pytest
from sqlalchemy import func, select

from refmanager.database import SessionLocal, transaction
from refmanager.domain.references import BookReference, LinkReference, NoteReference
from refmanager.domain.values import Title, Version
from refmanager.exceptions import (
    ConstraintViolationError,
    NotFoundError,
    PositionErrorReason,
    PositionValidationError,
    VersionConflictError,
)
from refmanager.repositories.categories import CategoryRepository
from refmanager.repositories.rows import base_references, book_references

from factories import make_book, make_link, make_note


def titles(category):
    return [reference.title for reference in category.references]


def stored_positions(db, category_id):
    with transaction(db):
        rows = db.execute(
            select(base_references.c.title, base_references.c.position)
            .where(base_references.c.category_id == category_id)
            .order_by(base_references.c.position)
        ).all()
    return [(row.title, row.position) for row in rows]


def count_references(db, category_id):
    with transaction(db):
        return db.execute(
            select(func.count())
            .select_from(base_references)
            .where(base_references.c.category_id == category_id)
        ).scalar_one()


class TestGet:
    """Tests for reading an aggregate."""

    def test_get_empty_category(self, categories, empty_category):
        category = categories.get(empty_category.id)
        assert category.title == "Reading"
        assert category.version == 1
        assert category.references == ()

    def test_get_missing_category(self, categories):
        with pytest.raises(NotFoundError):
            categories.get(9999)

    def test_get_rebuilds_every_variant(self, categories, filled_category):
        category = categories.get(filled_category.id)
        book, link, note, second_book = category.references

        assert isinstance(book, BookReference)
        assert book.isbn == "978-0132350884"
        assert book.description == "A book"
        assert isinstance(link, LinkReference)
        assert link.url == "https://docs.python.org"
        assert isinstance(note, NoteReference)
        assert note.text == "Remember this"
        assert isinstance(second_book, BookReference)
        assert all(reference.starred is False for reference in category.references)

    def test_positions_are_dense(self, db, categories, filled_category):
        """Stored positions are exactly 0..n-1."""
        positions = [position for _, position in stored_positions(db, filled_category.id)]
        assert positions == [0, 1, 2, 3]
        assert categories.get(filled_category.id).positions() == {
            reference.id: index for index, reference in enumerate(filled_category.references)
        }


class TestUpdateTitle:
    """Tests for renaming a category."""

    def test_update_title_increments_version(self, categories, empty_category):
        category = categories.update_title(empty_category.id, Title("Papers"), Version(1))
        assert category.title == "Papers"
        assert category.version == 2

    def test_second_update_with_same_version_conflicts(self, categories, empty_category):
        """Only the first of two writes based on the same read is applied."""
        categories.update_title(empty_category.id, Title("First"), Version(1))

        with pytest.raises(VersionConflictError) as exc_info:
            categories.update_title(empty_category.id, Title("Second"), Version(1))

        assert exc_info.value.retryable is True
        category = categories.get(empty_category.id)
        assert category.title == "First"
        assert category.version == 2

    def test_update_missing_category_is_a_conflict(self, categories):
        """Not-found and stale version are reported the same way."""
        with pytest.raises(VersionConflictError):
            categories.update_title(9999, Title("Ghost"), Version(1))


class TestAddReference:
    """Tests for appending references."""

    def test_add_first_reference(self, db, categories, empty_category):
        """Adding to an empty category at version 1 yields version 2 and position 0."""
        category = categories.add_reference(empty_category.id, make_book(), Version(1))

        assert category.version == 2
        assert titles(category) == ["Book X"]
        assert category.references[0].id is not None
        assert stored_positions(db, empty_category.id) == [("Book X", 0)]

    def test_add_with_stale_version_conflicts(self, db, categories, empty_category):
        """Reusing version 1 after a successful add stores nothing more."""
        categories.add_reference(empty_category.id, make_book(), Version(1))

        with pytest.raises(VersionConflictError):
            categories.add_reference(empty_category.id, make_book("Book Y"), Version(1))

        assert count_references(db, empty_category.id) == 1
        with transaction(db):
            payloads = db.execute(select(func.count()).select_from(book_references)).scalar_one()
        assert payloads == 1
        assert categories.get(empty_category.id).version == 2

    def test_add_to_missing_category_conflicts(self, categories):
        with pytest.raises(VersionConflictError):
            categories.add_reference(9999, make_note(), Version(1))

    def test_add_appends_at_end(self, categories, filled_category):
        category = categories.add_reference(
            filled_category.id, make_link("E", "https://example.com"), filled_category.version
        )
        assert titles(category) == ["A", "B", "C", "D", "E"]
        assert category.version == filled_category.version + 1

    def test_reference_ids_are_unique_across_categories(
        self, categories, category_list, filled_category
    ):
        other = category_list.add(Title("Other"))
        other = categories.add_reference(other.id, make_note(), other.version)
        assert other.references[0].id not in filled_category.reference_ids()

    def test_add_preserves_starred_flag(self, categories, empty_category):
        starred = NoteReference(title=Title("Starred"), text="!", starred=True)
        category = categories.add_reference(empty_category.id, starred, Version(1))
        assert category.references[0].starred is True

    def test_failed_payload_insert_rolls_back_base_row(
        self, db, monkeypatch, categories, empty_category
    ):
        """A payload row the store rejects leaves no base row and no version bump."""
        monkeypatch.setattr(
            "refmanager.repositories.categories.payload_values",
            lambda reference: (book_references, {"isbn": None, "description": ""}),
        )

        with pytest.raises(ConstraintViolationError) as exc_info:
            categories.add_reference(empty_category.id, make_book(), Version(1))

        assert exc_info.value.retryable is False
        assert count_references(db, empty_category.id) == 0
        with transaction(db):
            payloads = db.execute(select(func.count()).select_from(book_references)).scalar_one()
        assert payloads == 0
        assert categories.get(empty_category.id).version == 1


class TestRemoveReference:
    """Tests for removing references."""

    def test_remove_compacts_remaining(self, db, categories, filled_category):
        """Removing the reference at position 1 renumbers the others 0..2 in order."""
        removed = filled_category.references[1]

        category = categories.remove_reference(
            filled_category.id, removed.id, filled_category.version
        )

        assert titles(category) == ["A", "C", "D"]
        assert category.version == filled_category.version + 1
        assert stored_positions(db, filled_category.id) == [("A", 0), ("C", 1), ("D", 2)]

    def test_remove_last_reference(self, categories, empty_category):
        category = categories.add_reference(empty_category.id, make_book(), Version(1))
        category = categories.remove_reference(
            category.id, category.references[0].id, category.version
        )
        assert category.references == ()
        assert category.version == 3

    def test_remove_with_stale_version_conflicts(self, db, categories, filled_category):
        stale = filled_category.version
        categories.update_title(filled_category.id, Title("Renamed"), stale)

        with pytest.raises(VersionConflictError):
            categories.remove_reference(filled_category.id, filled_category.references[0].id, stale)

        assert count_references(db, filled_category.id) == 4

    def test_remove_unknown_reference(self, categories, filled_category):
        with pytest.raises(NotFoundError):
            categories.remove_reference(filled_category.id, 9999, filled_category.version)
        assert categories.get(filled_category.id).version == filled_category.version

    def test_remove_reference_of_other_category(self, categories, category_list, filled_category):
        """A reference can only be removed through the category that owns it."""
        other = category_list.add(Title("Other"))
        with pytest.raises(NotFoundError):
            categories.remove_reference(other.id, filled_category.references[0].id, other.version)
        assert len(categories.get(filled_category.id).references) == 4


class TestReorderReferences:
    """Tests for reordering references."""

    def test_two_element_swap(self, categories, empty_category):
        """Swapping {A:1, B:0} puts B before A."""
        category = empty_category
        for title in ("A", "B"):
            category = categories.add_reference(category.id, make_note(title), category.version)
        a, b = category.references

        reordered = categories.reorder_references(category.id, {a.id: 1, b.id: 0}, category.version)

        assert titles(reordered) == ["B", "A"]
        assert reordered.version == category.version + 1

    def test_full_permutation(self, db, categories, filled_category):
        a, b, c, d = filled_category.reference_ids()

        category = categories.reorder_references(
            filled_category.id, {a: 3, b: 2, c: 1, d: 0}, filled_category.version
        )

        assert titles(category) == ["D", "C", "B", "A"]
        assert [position for _, position in stored_positions(db, filled_category.id)] == [
            0,
            1,
            2,
            3,
        ]

    def test_identity_reorder_keeps_order_and_bumps_version(self, categories, filled_category):
        category = categories.reorder_references(
            filled_category.id, filled_category.positions(), filled_category.version
        )
        assert category.references == filled_category.references
        assert category.version == filled_category.version + 1

    def test_reorder_missing_id_is_rejected(self, db, categories, filled_category):
        """A map that leaves out an existing reference changes nothing."""
        positions = filled_category.positions()
        positions.pop(filled_category.references[-1].id)
        before = stored_positions(db, filled_category.id)

        with pytest.raises(PositionValidationError) as exc_info:
            categories.reorder_references(filled_category.id, positions, filled_category.version)

        assert exc_info.value.reason == PositionErrorReason.MISSING_ID
        assert stored_positions(db, filled_category.id) == before
        assert categories.get(filled_category.id).version == filled_category.version

    def test_reorder_duplicate_position_is_rejected(self, categories, filled_category):
        a, b, c, d = filled_category.reference_ids()
        with pytest.raises(PositionValidationError) as exc_info:
            categories.reorder_references(
                filled_category.id, {a: 0, b: 0, c: 1, d: 2}, filled_category.version
            )
        assert exc_info.value.reason == PositionErrorReason.DUPLICATE_POSITION

    def test_reorder_with_stale_version_conflicts(self, db, categories, filled_category):
        stale = filled_category.version
        categories.update_title(filled_category.id, Title("Renamed"), stale)
        a, b, c, d = filled_category.reference_ids()
        before = stored_positions(db, filled_category.id)

        with pytest.raises(VersionConflictError):
            categories.reorder_references(filled_category.id, {a: 1, b: 0, c: 2, d: 3}, stale)

        assert stored_positions(db, filled_category.id) == before

    def test_reorder_missing_category(self, categories):
        with pytest.raises(NotFoundError):
            categories.reorder_references(9999, {}, Version(1))

    def test_reorder_empty_category(self, categories, empty_category):
        category = categories.reorder_references(empty_category.id, {}, Version(1))
        assert category.version == 2


def test_interleaved_writers_are_ordered_by_version(categories, empty_category):
    """A writer holding an old read loses to one that committed in between."""
    other_session = SessionLocal()
    try:
        other = CategoryRepository(other_session)
        seen = categories.get(empty_category.id)

        other.add_reference(empty_category.id, make_book("Theirs"), seen.version)

        with pytest.raises(VersionConflictError):
            categories.add_reference(empty_category.id, make_book("Mine"), seen.version)

        assert titles(categories.get(empty_category.id)) == ["Theirs"]
    finally:
        other_session.close()


def test_concurrent_writers_same_version(categories, empty_category):
    """Of several concurrent adds based on one version, exactly one commits."""
    outcomes = []
    lock = threading.Lock()
    barrier = threading.Barrier(4)

    def writer(title):
        session = SessionLocal()
        try:
            barrier.wait()
            CategoryRepository(session).add_reference(
                empty_category.id, make_note(title), Version(1)
            )
            result = "ok"
        except VersionConflictError:
            result = "conflict"
        finally:
            session.close()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=writer, args=(f"Note {i}",)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["conflict", "conflict", "conflict", "ok"]
    category = categories.get(empty_category.id)
    assert len(category.references) == 1
    assert category.version == 2
