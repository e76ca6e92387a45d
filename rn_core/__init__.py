"""Order model, announcement formatting and Nostr event signing shared by the bridge."""

from .announcement import format_announcement, order_type_label
from .currencies import CURRENCIES, currency_label
from .events import NostrEvent, build_text_note, public_key_hex
from .types import Order, OrderType

__all__ = [
    "CURRENCIES",
    "NostrEvent",
    "Order",
    "OrderType",
    "build_text_note",
    "currency_label",
    "format_announcement",
    "order_type_label",
    "public_key_hex",
]
