from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Uuid
from sqlalchemy.orm import relationship

from ..database import Base


class ProductAvailability(Base):
    __tablename__ = "product_availability"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_product_availability_quantity_non_negative"),
    )

    # Integer key doubles as insertion order for the booking tie-break.
    id = Column(Integer, primary_key=True, autoincrement=True)

    product_id = Column(
        Uuid,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    store_id = Column(
        Uuid,
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    quantity = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="availability")
    store = relationship("Store", back_populates="availability")
