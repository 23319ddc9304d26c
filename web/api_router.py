"""
API router for customer-facing lookups.

Order tracking runs server-side so the orders table never has to be
readable by anonymous clients: the customer supplies an order id or their
exact email and gets back at most one order.
"""

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from db import get_db_session
from enums.text_entity import TextEntity
from exceptions.order import InvalidTrackingQueryException
from services.order import OrderService
from utils.localizator import Localizator

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api", tags=["api"])


def generate_correlation_id() -> str:
    """Generate unique correlation ID for request tracing."""
    return f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


class TrackOrderPayload(BaseModel):
    search_value: str | None = Field(default=None, alias="searchValue", description="Order ID or customer email")


@api_router.post("/track-order")
async def track_order(payload: TrackOrderPayload):
    """
    Find the newest order matching an order ID or customer email.

    Request Body:
        {"searchValue": "3f2b...-..." | "customer@example.com"}

    Returns:
        200: {"order": {...}} or {"order": null} when nothing matches
        400: Empty search value
        500: Data service failure
    """
    correlation_id = generate_correlation_id()
    search_value = (payload.search_value or "").strip()
    # Only a short prefix of the search value is logged
    logger.info(f"[{correlation_id}] Searching for order with value: {search_value[:3]}***")

    try:
        async with get_db_session() as session:
            order = await OrderService.track_order(search_value, session)
    except InvalidTrackingQueryException:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=Localizator.get_text(TextEntity.USER, "search_value_required", lang="en")
        )
    except SQLAlchemyError as e:
        logger.error(f"[{correlation_id}] Database error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to search for order"
        )

    if order is None:
        logger.info(f"[{correlation_id}] No order found")
        return {"order": None}

    logger.info(f"[{correlation_id}] Order found: {order.id[:8]}***")
    return {"order": order.model_dump(mode="json")}
