"""Category schemas."""

from pydantic import BaseModel, ConfigDict, Field

from refmanager.domain.category import Category
from refmanager.schemas.reference import ReferenceResponse, TitleField


class CategoryCreate(BaseModel):
    """Create a new category."""

    title: TitleField


class CategoryUpdate(BaseModel):
    """Rename a category."""

    title: TitleField
    version: int = Field(..., ge=0)


class CategoryReorder(BaseModel):
    """Reorder the category list."""

    positions: dict[int, int]


class CategorySummaryResponse(BaseModel):
    """Category list entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str


class CategoryResponse(BaseModel):
    """Category with its references in order."""

    id: int
    title: str
    version: int
    references: list[ReferenceResponse]

    @classmethod
    def from_domain(cls, category: Category) -> "CategoryResponse":
        return cls(
            id=category.id,
            title=category.title,
            version=category.version,
            references=[
                ReferenceResponse.from_domain(reference, position)
                for position, reference in enumerate(category.references)
            ],
        )
