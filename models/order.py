import uuid
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, String, Float, DateTime, Text, JSON, Enum as SQLEnum, CheckConstraint, func

from enums.order_status import OrderStatus
from models.base import Base


class Order(Base):
    __tablename__ = 'orders'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)
    shipping_address = Column(Text, nullable=False)

    # Items Snapshot (JSON)
    # Frozen copy of the cart at order creation time, never a live product reference
    # Format: [{"product_id": "...", "name": "Lamp", "price": 10.0, "quantity": 2}]
    order_items = Column(JSON, nullable=False)

    total_amount = Column(Float, nullable=False)
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.NEW)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_total_amount_non_negative'),
    )


class OrderItemDTO(BaseModel):
    product_id: str
    name: str
    price: float
    quantity: int


class CustomerDetailsDTO(BaseModel):
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    shipping_address: str = ""


class OrderDTO(BaseModel):
    id: str | None = None
    customer_name: str
    customer_email: str
    customer_phone: str
    shipping_address: str
    order_items: list[OrderItemDTO]
    total_amount: float
    status: OrderStatus = OrderStatus.NEW
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderHandoffDTO(BaseModel):
    message: str
    native_url: str | None = None   # messaging app deep link
    web_url: str | None = None      # opened if the deep link does not resolve in time
    fallback_delay_ms: int = 0


class PlacedOrderDTO(BaseModel):
    order: OrderDTO
    handoff: OrderHandoffDTO | None = None
    inventory_updated: bool = True
