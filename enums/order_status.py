from enum import Enum
from functools import total_ordering


@total_ordering
class OrderStatus(Enum):
    NEW = "new"                     # Placed by the customer, awaiting manual payment confirmation
    PROCESSING = "processing"       # Payment confirmed, being prepared
    SHIPPED = "shipped"             # Handed to the courier
    DELIVERED = "delivered"         # Received by the customer

    @property
    def rank(self) -> int:
        return list(OrderStatus).index(self)

    def __lt__(self, other):
        if not isinstance(other, OrderStatus):
            return NotImplemented
        return self.rank < other.rank
