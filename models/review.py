from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, CheckConstraint, func

from models.base import Base


class Review(Base):
    __tablename__ = 'reviews'

    id = Column(Integer, primary_key=True)
    product_id = Column(String(36), ForeignKey('products.id', ondelete="CASCADE"), nullable=False)
    rating = Column(Integer, nullable=False)
    review_text = Column(Text, nullable=True)
    reviewer_name = Column(String, nullable=False)
    reviewer_email = Column(String, nullable=True)
    # Reviews are hidden until an admin approves them
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='check_rating_range'),
    )


class ReviewDTO(BaseModel):
    id: int | None = None
    product_id: str
    rating: int = Field(ge=1, le=5)
    review_text: str | None = None
    reviewer_name: str
    reviewer_email: str | None = None
    is_approved: bool = False
    created_at: datetime | None = None
