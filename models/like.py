from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, func

from models.base import Base


# liker_id is either an authenticated user id or a persisted guest id
class ProductLike(Base):
    __tablename__ = 'product_likes'

    id = Column(Integer, primary_key=True)
    product_id = Column(String(36), ForeignKey('products.id', ondelete="CASCADE"), nullable=False)
    liker_id = Column(String, nullable=False)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        UniqueConstraint('product_id', 'liker_id', name='uq_product_like_pair'),
    )


class LikeRecordDTO(BaseModel):
    id: int | None = None
    product_id: str
    liker_id: str
    created_at: datetime | None = None


GUEST_LIKES_SNAPSHOT_VERSION = 1


class GuestLikesSnapshotDTO(BaseModel):
    version: Literal[1] = GUEST_LIKES_SNAPSHOT_VERSION
    product_ids: list[str] = []


class ActorId(BaseModel):
    """The identity likes are recorded under: an authenticated user or a persisted guest id."""
    model_config = ConfigDict(frozen=True)

    id: str
    is_guest: bool
