from pydantic import BaseModel, ConfigDict

from models.product import ProductDTO

ALL_CATEGORIES = "All"


class FilterKey(BaseModel):
    """(search term, category) pair scoping a paginated catalog query."""
    model_config = ConfigDict(frozen=True)

    search: str = ""
    category: str = ALL_CATEGORIES

    @classmethod
    def of(cls, search: str | None = None, category: str | None = None) -> "FilterKey":
        return cls(search=(search or "").strip(), category=category or ALL_CATEGORIES)

    @property
    def is_all_categories(self) -> bool:
        return self.category == ALL_CATEGORIES


class CatalogPageDTO(BaseModel):
    products: list[ProductDTO]
    has_more: bool
    total_count: int
    cursor: int
