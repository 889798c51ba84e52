"""Pytest configuration and fixtures."""

import os

# Point the application at the test database before it builds its engine
if os.getenv("DATABASE_URL"):
    # Running in Docker - use the PostgreSQL test database
    os.environ["DATABASE_URL"] = os.environ["DATABASE_URL"].replace(
        "/references", "/references_test"
    )
else:
    # Running locally - use SQLite
    os.environ["DATABASE_URL"] = "sqlite:///./test.db"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from refmanager.database import Base, SessionLocal, engine, get_db, init_db  # noqa: E402
from refmanager.domain.values import Title  # noqa: E402
from refmanager.main import app  # noqa: E402
from refmanager.repositories.categories import CategoryRepository  # noqa: E402
from refmanager.repositories.category_list import CategoryListRepository  # noqa: E402
from refmanager.repositories.references import ReferenceRepository  # noqa: E402

from factories import make_book, make_link, make_note  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    init_db(engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = SessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def category_list(db):
    return CategoryListRepository(db)


@pytest.fixture
def categories(db):
    return CategoryRepository(db)


@pytest.fixture
def references(db):
    return ReferenceRepository(db)


@pytest.fixture
def empty_category(category_list):
    """A freshly created category (version 1, no references)."""
    return category_list.add(Title("Reading"))


@pytest.fixture
def filled_category(categories, empty_category):
    """A category holding a book, a link, a note and a second book, in that order."""
    category = empty_category
    for reference in (make_book("A"), make_link("B"), make_note("C"), make_book("D")):
        category = categories.add_reference(category.id, reference, category.version)
    return category
