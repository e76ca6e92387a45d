from __future__ import annotations

import logging
import struct
from typing import Optional

from .currencies import currency_label
from .types import Order, OrderType

PLACEHOLDER = "?"

TEMPLATE = (
    "Type: {type}\n"
    "Amount: {amount}\n"
    "Currency: {currency}\n"
    "Payment method: {payment_method}\n"
    "Premium: {premium}\n"
    "Price: {price}\n"
    "LINK(TOR): {link}"
)

log = logging.getLogger("rn_core.announcement")


def order_type_label(code: int) -> str:
    try:
        return OrderType(code).name
    except ValueError:
        return "UNKNOWN"


def _parse_amount(raw: Optional[str], field: str, order_id: int) -> Optional[float]:
    try:
        return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        log.warning("Cannot parse %s=%r for order id %s", field, raw, order_id)
        return None


def _round_int(value: Optional[float]) -> str:
    # Half-to-even on the parsed float, same as the service's own renderer.
    if value is None:
        return PLACEHOLDER
    return f"{value:.0f}"


def format_amount(order: Order) -> str:
    if order.has_range:
        lo = _parse_amount(order.min_amount, "min_amount", order.id)
        hi = _parse_amount(order.max_amount, "max_amount", order.id)
        return f"{_round_int(lo)}-{_round_int(hi)}"
    return _round_int(_parse_amount(order.amount, "amount", order.id))


def _single(value: Optional[float]) -> Optional[float]:
    """Narrow to IEEE single precision, the width premium and price are rendered at."""
    if value is None:
        return None
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return None


def format_premium(premium: Optional[float]) -> str:
    premium = _single(premium)
    if premium is None:
        return PLACEHOLDER
    return f"{premium:.1f}%"


def format_announcement(order: Order, referral_url: str) -> str:
    """Render the public text note for one order.

    Never raises: fields that cannot be parsed are rendered as ``?``.
    The link always points at the referral URL, not the fetch endpoint.
    """
    return TEMPLATE.format(
        type=order_type_label(order.type),
        amount=format_amount(order),
        currency=currency_label(order.currency),
        payment_method=order.payment_method,
        premium=format_premium(order.premium),
        price=_round_int(_single(order.price)),
        link=referral_url,
    )
