import uuid
from sqlalchemy import Column, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from .database import Base


class ProductCategory(Base):
    """Association object for the many-to-many link between Product and Category.
    At most one row per (product, category) pair."""
    __tablename__ = "product_categories"
    __table_args__ = (
        UniqueConstraint("product_id", "category_id", name="ux_product_categories_product_category"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Uuid, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True)

    product = relationship("Product", back_populates="categories")
    category = relationship("Category", back_populates="products")
