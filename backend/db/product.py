import uuid
from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship

from .database import Base


class Product(Base):
    """Product model - catalog entry with unique id and display name"""
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, index=True)

    categories = relationship("ProductCategory", back_populates="product", cascade="all, delete-orphan")
    availability = relationship("ProductAvailability", back_populates="product", cascade="all, delete-orphan")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name
        }
