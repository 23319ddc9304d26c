import re
from urllib.parse import quote

import config
from enums.text_entity import TextEntity
from models.order import OrderItemDTO, CustomerDetailsDTO, OrderHandoffDTO
from services.pricing import PricingService
from utils.localizator import Localizator

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


class OrderHandoffService:
    """
    One-way order notification through a messaging deep link.

    The customer's device opens native_url first; if that does not resolve
    within fallback_delay_ms the web_url is opened instead. Nothing comes
    back from either link.
    """

    @staticmethod
    def compose_summary(items: list[OrderItemDTO],
                        total: float,
                        currency_symbol: str,
                        customer: CustomerDetailsDTO | None = None,
                        order_id: str | None = None) -> str:
        if not items:
            return Localizator.get_text(TextEntity.COMMON, "handoff_enquiry")

        lines = [Localizator.get_text(TextEntity.COMMON, "handoff_order_intro"), ""]
        for index, item in enumerate(items, start=1):
            lines.append(Localizator.format_text(TextEntity.COMMON, "handoff_order_line", {
                "index": index,
                "product_name": item.name,
                "quantity": item.quantity,
                "line_total": PricingService.format_price(item.price * item.quantity, currency_symbol)
            }))
        lines.append("")
        lines.append(Localizator.format_text(TextEntity.COMMON, "handoff_order_total", {
            "total": PricingService.format_price(total, currency_symbol)
        }))
        if order_id:
            lines.append(Localizator.format_text(TextEntity.COMMON, "handoff_order_reference", {"order_id": order_id}))
        if customer:
            lines.append("")
            lines.append(Localizator.format_text(TextEntity.COMMON, "handoff_customer_details", {
                "name": customer.customer_name,
                "email": customer.customer_email,
                "phone": customer.customer_phone,
                "address": customer.shipping_address
            }))
        return "\n".join(lines)

    @staticmethod
    def build_handoff(whatsapp_number: str | None,
                      message: str,
                      fallback_delay_ms: int = config.HANDOFF_FALLBACK_DELAY_MS) -> OrderHandoffDTO:
        """
        Build the deep link and web fallback for a phone number or wa.me link.

        Without a usable number only the message is returned.
        """
        digits = re.sub(r"[^0-9]", "", whatsapp_number or "")
        if not digits:
            return OrderHandoffDTO(message=message)

        text = quote(message, safe=_URI_COMPONENT_SAFE)
        return OrderHandoffDTO(
            message=message,
            native_url=f"whatsapp://send?phone={digits}&text={text}",
            web_url=f"https://wa.me/{digits}?text={text}",
            fallback_delay_ms=fallback_delay_ms
        )
