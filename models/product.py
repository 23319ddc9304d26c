import uuid
from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, String, Float, Boolean, DateTime, Integer, Text, CheckConstraint, func

from models.base import Base


# Product is owned by the catalog; the storefront only decrements quantity after an order
class Product(Base):
    __tablename__ = 'products'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    image_url = Column(String, nullable=True)
    video_url = Column(String, nullable=True)
    in_stock = Column(Boolean, nullable=False, default=True)
    quantity = Column(Integer, nullable=False, default=0)
    likes_count = Column(Integer, nullable=False, default=0)
    category = Column(String, nullable=True)
    featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_price_non_negative'),
        CheckConstraint('quantity >= 0', name='check_quantity_non_negative'),
        CheckConstraint('likes_count >= 0', name='check_likes_count_non_negative'),
    )


class ProductDTO(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: float = Field(ge=0)
    image_url: str | None = None
    video_url: str | None = None
    in_stock: bool = True
    quantity: int = Field(default=0, ge=0)
    likes_count: int = 0
    category: str | None = None
    featured: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
