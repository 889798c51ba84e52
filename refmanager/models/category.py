"""Category model."""

from sqlalchemy import Column, Integer, String, UniqueConstraint

from refmanager.database import Base


class Category(Base):
    """Category row: title, optimistic-lock version and place in the category list."""

    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("position", name="uq_categories_position"),)

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    version = Column(Integer, nullable=False, default=1)
    position = Column(Integer, nullable=False)
