from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional


class OrderType(IntEnum):
    BUY = 0
    SELL = 1


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _opt_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _opt_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _opt_bool(value: Any) -> bool:
    # Only JSON true/false; strings such as "false" are not flags.
    return value if isinstance(value, bool) else False


@dataclass(frozen=True)
class Order:
    """One public order as returned by the RoboSats book endpoint.

    Numeric amounts stay as text because the service sends them that way;
    parsing happens at formatting time so a bad value never drops the order.
    """

    id: int
    type: int
    currency: int
    amount: Optional[str] = None
    has_range: bool = False
    min_amount: Optional[str] = None
    max_amount: Optional[str] = None
    payment_method: str = ""
    premium: Optional[float] = None
    price: Optional[float] = None
    created_at: Optional[str] = None
    expires_at: Optional[str] = None
    is_explicit: bool = False
    satoshis: Optional[str] = None
    bondless_taker: bool = False
    maker: Optional[int] = None
    escrow_duration: Optional[int] = None
    maker_nick: Optional[str] = None
    maker_status: Optional[str] = None
    raw: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        if not isinstance(data, dict):
            raise ValueError(f"order must be a JSON object (got {type(data).__name__})")
        order_id = data.get("id")
        if isinstance(order_id, bool) or not isinstance(order_id, int):
            raise ValueError(f"order id must be an integer (got {order_id!r})")
        type_code = _opt_int(data.get("type"))
        currency = _opt_int(data.get("currency"))
        return cls(
            id=order_id,
            type=-1 if type_code is None else type_code,
            currency=-1 if currency is None else currency,
            amount=_opt_str(data.get("amount")),
            has_range=_opt_bool(data.get("has_range")),
            min_amount=_opt_str(data.get("min_amount")),
            max_amount=_opt_str(data.get("max_amount")),
            payment_method=str(data.get("payment_method") or ""),
            premium=_opt_float(data.get("premium")),
            price=_opt_float(data.get("price")),
            created_at=_opt_str(data.get("created_at")),
            expires_at=_opt_str(data.get("expires_at")),
            is_explicit=_opt_bool(data.get("is_explicit")),
            satoshis=_opt_str(data.get("satoshis")),
            bondless_taker=_opt_bool(data.get("bondless_taker")),
            maker=_opt_int(data.get("maker")),
            escrow_duration=_opt_int(data.get("escrow_duration")),
            maker_nick=_opt_str(data.get("maker_nick")),
            maker_status=_opt_str(data.get("maker_status")),
            raw=data,
        )
