from sqlalchemy import select, func, update, or_, case
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.catalog import FilterKey
from models.product import Product, ProductDTO


class ProductRepository:

    @staticmethod
    def _filter_conditions(filter_key: FilterKey) -> list:
        conditions = []
        if filter_key.search:
            pattern = f"%{filter_key.search}%"
            conditions.append(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        if not filter_key.is_all_categories:
            conditions.append(Product.category == filter_key.category)
        return conditions

    @staticmethod
    async def get_by_id(product_id: str, session: Session | AsyncSession) -> ProductDTO | None:
        stmt = select(Product).where(Product.id == product_id)
        product = await session_execute(stmt, session)
        product = product.scalar()
        if product is None:
            return None
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def get_by_ids(product_ids: list[str], session: Session | AsyncSession) -> dict[str, ProductDTO]:
        """
        Batch load products for multiple ids (eliminates N+1 queries).

        Returns:
            Dict mapping product_id -> ProductDTO (missing ids are absent)
        """
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        result = await session_execute(stmt, session)
        return {
            product.id: ProductDTO.model_validate(product, from_attributes=True)
            for product in result.scalars().all()
        }

    @staticmethod
    async def get_page(filter_key: FilterKey,
                       offset: int,
                       limit: int,
                       session: Session | AsyncSession) -> tuple[list[ProductDTO], int]:
        """
        Fetch one page of the catalog, newest first.

        Returns:
            (products, total matching count)
        """
        conditions = ProductRepository._filter_conditions(filter_key)
        stmt = (select(Product)
                .where(*conditions)
                .order_by(Product.created_at.desc(), Product.id)
                .offset(offset)
                .limit(limit))
        products = await session_execute(stmt, session)
        products = [ProductDTO.model_validate(p, from_attributes=True) for p in products.scalars().all()]

        count_stmt = select(func.count()).select_from(Product).where(*conditions)
        total = await session_execute(count_stmt, session)
        return products, total.scalar()

    @staticmethod
    async def get_available_qty(product_id: str, session: Session | AsyncSession) -> int | None:
        stmt = select(Product.quantity).where(Product.id == product_id)
        quantity = await session_execute(stmt, session)
        return quantity.scalar()

    @staticmethod
    async def decrement_quantity(product_id: str, quantity: int, session: Session | AsyncSession) -> int | None:
        """
        Subtract sold quantity from on-hand stock, clamping at zero.

        Read-then-write without locking: concurrent checkouts for the same
        product can both read the same starting quantity.

        Returns:
            New on-hand quantity, or None if the product no longer exists
        """
        current = await ProductRepository.get_available_qty(product_id, session)
        if current is None:
            return None
        new_quantity = max(0, current - quantity)
        stmt = (update(Product)
                .where(Product.id == product_id)
                .values(quantity=new_quantity, in_stock=new_quantity > 0))
        await session_execute(stmt, session)
        return new_quantity

    @staticmethod
    async def adjust_likes_count(product_id: str, delta: int, session: Session | AsyncSession) -> None:
        stmt = (update(Product)
                .where(Product.id == product_id)
                .values(likes_count=case((Product.likes_count + delta < 0, 0),
                                         else_=Product.likes_count + delta)))
        await session_execute(stmt, session)
