import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit
from exceptions.review import InvalidReviewException
from models.review import ReviewDTO
from repositories.review import ReviewRepository


class ReviewService:

    @staticmethod
    async def submit(product_id: str,
                     rating: int,
                     reviewer_name: str,
                     session: AsyncSession | Session,
                     review_text: str | None = None,
                     reviewer_email: str | None = None) -> ReviewDTO:
        """
        Store a customer review. New reviews stay hidden until approved.

        Raises:
            InvalidReviewException: rating outside 1-5 or blank reviewer name;
                message_key names the user-facing l10n text
        """
        if not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidReviewException("rating must be between 1 and 5", "review_rating_required")
        reviewer_name = (reviewer_name or "").strip()
        if not reviewer_name:
            raise InvalidReviewException("reviewer name is required", "review_name_required")

        review = await ReviewRepository.create(ReviewDTO(
            product_id=product_id,
            rating=rating,
            review_text=(review_text or "").strip() or None,
            reviewer_name=reviewer_name,
            reviewer_email=(reviewer_email or "").strip() or None,
            is_approved=False
        ), session)
        await session_commit(session)
        logging.info(f"[Review] Review {review.id} submitted for product {product_id}")
        return review

    @staticmethod
    async def get_approved(product_id: str, session: AsyncSession | Session) -> list[ReviewDTO]:
        return await ReviewRepository.get_approved_by_product(product_id, session)

    @staticmethod
    def average_rating(reviews: list[ReviewDTO]) -> float | None:
        if not reviews:
            return None
        return round(sum(review.rating for review in reviews) / len(reviews), 1)
