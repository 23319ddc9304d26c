import uuid

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.order_status import OrderStatus
from models.order import Order, OrderDTO


class OrderRepository:

    @staticmethod
    async def create(order_dto: OrderDTO, session: Session | AsyncSession) -> OrderDTO:
        order_id = order_dto.id or str(uuid.uuid4())
        order = Order(
            id=order_id,
            customer_name=order_dto.customer_name,
            customer_email=order_dto.customer_email,
            customer_phone=order_dto.customer_phone,
            shipping_address=order_dto.shipping_address,
            order_items=[item.model_dump() for item in order_dto.order_items],
            total_amount=order_dto.total_amount,
            status=order_dto.status
        )
        session.add(order)
        await session_flush(session)
        return order_dto.model_copy(update={'id': order_id})

    @staticmethod
    async def get_by_id(order_id: str, session: Session | AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id)
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_latest_by_email(email: str, session: Session | AsyncSession) -> OrderDTO | None:
        """Exact, case-insensitive email match; the newest order wins."""
        stmt = (select(Order)
                .where(func.lower(Order.customer_email) == email.lower())
                .order_by(Order.created_at.desc())
                .limit(1))
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def update_status(order_id: str, status: OrderStatus, session: Session | AsyncSession) -> int:
        stmt = update(Order).where(Order.id == order_id).values(status=status)
        result = await session_execute(stmt, session)
        return result.rowcount
