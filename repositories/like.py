from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.like import ProductLike


class LikeRepository:

    @staticmethod
    async def exists(product_id: str, liker_id: str, session: Session | AsyncSession) -> bool:
        stmt = select(ProductLike.id).where(ProductLike.product_id == product_id,
                                            ProductLike.liker_id == liker_id)
        result = await session_execute(stmt, session)
        return result.scalar() is not None

    @staticmethod
    async def create(product_id: str, liker_id: str, session: Session | AsyncSession) -> None:
        session.add(ProductLike(product_id=product_id, liker_id=liker_id))
        await session_flush(session)

    @staticmethod
    async def delete(product_id: str, liker_id: str, session: Session | AsyncSession) -> int:
        stmt = delete(ProductLike).where(ProductLike.product_id == product_id,
                                         ProductLike.liker_id == liker_id)
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def get_product_ids_by_liker(liker_id: str, session: Session | AsyncSession) -> list[str]:
        stmt = (select(ProductLike.product_id)
                .where(ProductLike.liker_id == liker_id)
                .order_by(ProductLike.created_at.desc(), ProductLike.id.desc()))
        result = await session_execute(stmt, session)
        return list(result.scalars().all())
