import uuid
from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship

from .database import Base


class Store(Base):
    __tablename__ = "stores"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=True)

    availability = relationship("ProductAvailability", back_populates="store")
