from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.store_config import StoreConfig, StoreConfigDTO


class StoreConfigRepository:

    @staticmethod
    async def get(session: Session | AsyncSession) -> StoreConfigDTO | None:
        stmt = select(StoreConfig).limit(1)
        store_config = await session_execute(stmt, session)
        store_config = store_config.scalar()
        if store_config is None:
            return None
        return StoreConfigDTO.model_validate(store_config, from_attributes=True)
