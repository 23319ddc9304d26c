from pydantic import BaseModel


class RecentlyViewedEntryDTO(BaseModel):
    product_id: str
    viewed_at: int  # epoch milliseconds
