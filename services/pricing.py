import logging

from sqlalchemy.exc import SQLAlchemyError

import config
from db import get_db_session, SessionFactory
from models.cart import CartLineItemDTO
from models.store_config import StoreConfigDTO
from repositories.store_config import StoreConfigRepository


class PricingService:
    """Price arithmetic and display formatting."""

    @staticmethod
    def format_price(amount: float, currency_symbol: str) -> str:
        """
        Format an amount for display as symbol + amount with two decimals.

        No thousands separators and no per-currency decimal rules: every
        currency is shown with exactly two decimals.

        Example:
            >>> PricingService.format_price(1500, "₦")
            '₦1500.00'
        """
        return f"{currency_symbol}{amount:.2f}"

    @staticmethod
    def line_total(line: CartLineItemDTO) -> float:
        return line.product.price * line.quantity

    @staticmethod
    def cart_total(lines: list[CartLineItemDTO]) -> float:
        return sum((PricingService.line_total(line) for line in lines), 0.0)


class CurrencyService:
    """
    Currency settings backed by the store config singleton.

    The config is read once and reused until refresh(). Until it has been
    loaded, or when it has no currency, the config.DEFAULT_* values apply.
    """

    def __init__(self, session_factory: SessionFactory = get_db_session):
        self.session_factory = session_factory
        self._store_config: StoreConfigDTO | None = None
        self._loaded = False

    async def load(self) -> StoreConfigDTO | None:
        if self._loaded:
            return self._store_config
        try:
            async with self.session_factory() as session:
                self._store_config = await StoreConfigRepository.get(session)
        except SQLAlchemyError as e:
            # Keep defaults and try again on the next load()
            logging.warning(f"[Currency] Failed to load store config: {e}")
            return self._store_config
        self._loaded = True
        return self._store_config

    async def refresh(self) -> StoreConfigDTO | None:
        self._loaded = False
        return await self.load()

    @property
    def store_config(self) -> StoreConfigDTO | None:
        return self._store_config

    @property
    def currency_symbol(self) -> str:
        if self._store_config and self._store_config.currency_symbol:
            return self._store_config.currency_symbol
        return config.DEFAULT_CURRENCY_SYMBOL

    @property
    def currency_code(self) -> str:
        if self._store_config and self._store_config.currency_code:
            return self._store_config.currency_code
        return config.DEFAULT_CURRENCY_CODE

    @property
    def selected_country(self) -> str:
        if self._store_config and self._store_config.selected_country:
            return self._store_config.selected_country
        return config.DEFAULT_COUNTRY

    def format_price(self, amount: float) -> str:
        return PricingService.format_price(amount, self.currency_symbol)
