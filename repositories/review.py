from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.review import Review, ReviewDTO


class ReviewRepository:

    @staticmethod
    async def create(review_dto: ReviewDTO, session: Session | AsyncSession) -> ReviewDTO:
        review = Review(**review_dto.model_dump(exclude={'id', 'created_at'}))
        session.add(review)
        await session_flush(session)
        return review_dto.model_copy(update={'id': review.id})

    @staticmethod
    async def get_approved_by_product(product_id: str, session: Session | AsyncSession) -> list[ReviewDTO]:
        stmt = (select(Review)
                .where(Review.product_id == product_id, Review.is_approved == True)
                .order_by(Review.created_at.desc(), Review.id.desc()))
        reviews = await session_execute(stmt, session)
        return [ReviewDTO.model_validate(review, from_attributes=True) for review in reviews.scalars().all()]
