"""Category API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from refmanager.api.dependencies import get_category_list_repository, get_category_repository
from refmanager.domain.values import Version
from refmanager.repositories.categories import CategoryRepository
from refmanager.repositories.category_list import CategoryListRepository
from refmanager.schemas.category import (
    CategoryCreate,
    CategoryReorder,
    CategoryResponse,
    CategorySummaryResponse,
    CategoryUpdate,
)
from refmanager.schemas.reference import ReferenceAdd, ReferenceReorder

router = APIRouter(prefix="/api/v1", tags=["categories"])


@router.get("/categories", response_model=list[CategorySummaryResponse])
def get_categories(
    repo: Annotated[CategoryListRepository, Depends(get_category_list_repository)],
):
    """Get all categories in list order."""
    return repo.get_all()


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    category_data: CategoryCreate,
    repo: Annotated[CategoryListRepository, Depends(get_category_list_repository)],
):
    """Create a new category at the end of the list."""
    return CategoryResponse.from_domain(repo.add(category_data.title))


@router.put("/categories/order", response_model=list[CategorySummaryResponse])
def reorder_categories(
    reorder_data: CategoryReorder,
    repo: Annotated[CategoryListRepository, Depends(get_category_list_repository)],
):
    """Reorder the category list."""
    return repo.reorder(reorder_data.positions)


@router.get("/categories/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: int,
    repo: Annotated[CategoryRepository, Depends(get_category_repository)],
):
    """Get a category with its references and current version."""
    return CategoryResponse.from_domain(repo.get(category_id))


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    repo: Annotated[CategoryRepository, Depends(get_category_repository)],
):
    """Rename a category."""
    category = repo.update_title(category_id, category_data.title, Version(category_data.version))
    return CategoryResponse.from_domain(category)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    repo: Annotated[CategoryListRepository, Depends(get_category_list_repository)],
):
    """Delete a category and all of its references."""
    repo.delete(category_id)


@router.post(
    "/categories/{category_id}/references",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_reference(
    category_id: int,
    reference_data: ReferenceAdd,
    repo: Annotated[CategoryRepository, Depends(get_category_repository)],
):
    """Append a reference to a category."""
    category = repo.add_reference(
        category_id, reference_data.reference.to_domain(), Version(reference_data.version)
    )
    return CategoryResponse.from_domain(category)


@router.put("/categories/{category_id}/references/order", response_model=CategoryResponse)
def reorder_references(
    category_id: int,
    reorder_data: ReferenceReorder,
    repo: Annotated[CategoryRepository, Depends(get_category_repository)],
):
    """Reorder the references of a category."""
    category = repo.reorder_references(
        category_id, reorder_data.positions, Version(reorder_data.version)
    )
    return CategoryResponse.from_domain(category)


@router.delete("/categories/{category_id}/references/{reference_id}", response_model=CategoryResponse)
def remove_reference(
    category_id: int,
    reference_id: int,
    repo: Annotated[CategoryRepository, Depends(get_category_repository)],
    version: int = Query(..., ge=0, description="Category version last read by the caller"),
):
    """Remove a reference from a category."""
    category = repo.remove_reference(category_id, reference_id, Version(version))
    return CategoryResponse.from_domain(category)
