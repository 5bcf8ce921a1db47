"""Account, order and trade events pushed over the websocket streams."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .market_events import parse_fixed8


def _int(value: Any) -> int:
    return 0 if value is None else int(value)


def _str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class EventAssetBalance:
    """Balance of one asset as reported in an account event."""

    asset: str = ""
    free: int = 0
    frozen: int = 0
    locked: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "EventAssetBalance":
        data = data or {}
        return cls(
            asset=_str(data.get("a")),
            free=parse_fixed8(data.get("f")),
            frozen=parse_fixed8(data.get("r")),
            locked=parse_fixed8(data.get("l")),
        )


@dataclass
class AccountEvent:
    """Snapshot of an account's balances."""

    event_type: str = ""
    event_time: int = 0
    balances: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "AccountEvent":
        data = data or {}
        return cls(
            event_type=_str(data.get("e")),
            event_time=_int(data.get("E")),
            balances=[EventAssetBalance.from_dict(item) for item in data.get("B") or []],
        )


@dataclass
class OrderEvent:
    """Execution report for one of an account's orders."""

    event_type: str = ""
    event_time: int = 0
    symbol: str = ""
    side: int = 0
    order_type: int = 0
    time_in_force: int = 0
    order_qty: int = 0
    order_price: int = 0
    current_execution_type: str = ""
    current_order_status: str = ""
    order_id: str = ""
    last_executed_qty: int = 0
    last_executed_price: int = 0
    cumulative_filled_qty: int = 0
    commission_amount: str = ""
    transaction_time: int = 0
    trade_id: str = ""
    order_creation_time: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "OrderEvent":
        data = data or {}
        return cls(
            event_type=_str(data.get("e")),
            event_time=_int(data.get("E")),
            symbol=_str(data.get("s")),
            side=_int(data.get("S")),
            order_type=_int(data.get("o")),
            time_in_force=_int(data.get("f")),
            order_qty=parse_fixed8(data.get("q")),
            order_price=parse_fixed8(data.get("p")),
            current_execution_type=_str(data.get("x")),
            current_order_status=_str(data.get("X")),
            order_id=_str(data.get("i")),
            last_executed_qty=parse_fixed8(data.get("l")),
            last_executed_price=parse_fixed8(data.get("L")),
            cumulative_filled_qty=parse_fixed8(data.get("z")),
            commission_amount=_str(data.get("n")),
            transaction_time=_int(data.get("T")),
            trade_id=_str(data.get("t")),
            order_creation_time=_int(data.get("O")),
        )


@dataclass
class TradeEvent:
    """A trade executed on a market."""

    event_type: str = ""
    event_time: int = 0
    symbol: str = ""
    trade_id: str = ""
    price: int = 0
    qty: int = 0
    buyer_order_id: str = ""
    seller_order_id: str = ""
    trade_time: int = 0
    seller_address: str = ""
    buyer_address: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TradeEvent":
        data = data or {}
        return cls(
            event_type=_str(data.get("e")),
            event_time=_int(data.get("E")),
            symbol=_str(data.get("s")),
            trade_id=_str(data.get("t")),
            price=parse_fixed8(data.get("p")),
            qty=parse_fixed8(data.get("q")),
            buyer_order_id=_str(data.get("b")),
            seller_order_id=_str(data.get("a")),
            trade_time=_int(data.get("T")),
            seller_address=_str(data.get("sa")),
            buyer_address=_str(data.get("ba")),
        )