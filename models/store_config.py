from pydantic import BaseModel
from sqlalchemy import Column, String, Text

from models.base import Base


# Singleton row; read-only from the storefront's perspective
class StoreConfig(Base):
    __tablename__ = 'store_config'

    id = Column(String(36), primary_key=True)
    currency_code = Column(String(3), nullable=True)
    currency_symbol = Column(String(8), nullable=True)
    selected_country = Column(String, nullable=True)
    payment_details = Column(Text, nullable=True)
    whatsapp_link = Column(String, nullable=True)
    instagram_link = Column(String, nullable=True)
    facebook_link = Column(String, nullable=True)


class StoreConfigDTO(BaseModel):
    id: str | None = None
    currency_code: str | None = None
    currency_symbol: str | None = None
    selected_country: str | None = None
    payment_details: str | None = None
    whatsapp_link: str | None = None
    instagram_link: str | None = None
    facebook_link: str | None = None
