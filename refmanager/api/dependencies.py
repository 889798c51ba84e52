"""FastAPI dependencies providing repositories bound to the request session."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from refmanager.database import get_db
from refmanager.repositories.categories import CategoryRepository
from refmanager.repositories.category_list import CategoryListRepository
from refmanager.repositories.references import ReferenceRepository


def get_category_repository(db: Annotated[Session, Depends(get_db)]) -> CategoryRepository:
    """Get the category aggregate repository for this request."""
    return CategoryRepository(db)


def get_category_list_repository(
    db: Annotated[Session, Depends(get_db)],
) -> CategoryListRepository:
    """Get the category list repository for this request."""
    return CategoryListRepository(db)


def get_reference_repository(db: Annotated[Session, Depends(get_db)]) -> ReferenceRepository:
    """Get the reference content repository for this request."""
    return ReferenceRepository(db)
