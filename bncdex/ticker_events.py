"""24-hour ticker events pushed over the websocket streams."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .market_events import parse_double, parse_fixed8


def _int(value: Any) -> int:
    return 0 if value is None else int(value)


def _str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class TickerEvent:
    """Rolling 24-hour statistics for one market."""

    event_type: str = ""
    event_time: int = 0
    symbol: str = ""
    price_change: int = 0
    price_change_percent: int = 0
    weighted_avg_price: int = 0
    prev_close_price: int = 0
    last_price: int = 0
    last_quantity: int = 0
    bid_price: int = 0
    bid_quantity: int = 0
    ask_price: int = 0
    ask_quantity: int = 0
    open_price: int = 0
    high_price: int = 0
    low_price: int = 0
    volume: float = 0.0
    quote_volume: float = 0.0
    open_time: int = 0
    close_time: int = 0
    first_id: str = ""
    last_id: str = ""
    count: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TickerEvent":
        data = data or {}
        return cls(
            event_type=_str(data.get("e")),
            event_time=_int(data.get("E")),
            symbol=_str(data.get("s")),
            price_change=parse_fixed8(data.get("p")),
            price_change_percent=parse_fixed8(data.get("P")),
            weighted_avg_price=parse_fixed8(data.get("w")),
            prev_close_price=parse_fixed8(data.get("x")),
            last_price=parse_fixed8(data.get("c")),
            last_quantity=parse_fixed8(data.get("Q")),
            bid_price=parse_fixed8(data.get("b")),
            bid_quantity=parse_fixed8(data.get("B")),
            ask_price=parse_fixed8(data.get("a")),
            ask_quantity=parse_fixed8(data.get("A")),
            open_price=parse_fixed8(data.get("o")),
            high_price=parse_fixed8(data.get("h")),
            low_price=parse_fixed8(data.get("l")),
            volume=parse_double(data.get("v")),
            quote_volume=parse_double(data.get("q")),
            open_time=_int(data.get("O")),
            close_time=_int(data.get("C")),
            first_id=_str(data.get("F")),
            last_id=_str(data.get("L")),
            count=_int(data.get("n")),
        )


@dataclass
class MiniTickerEvent:
    """Reduced 24-hour statistics for one market."""

    event_type: str = ""
    event_time: int = 0
    symbol: str = ""
    last_price: int = 0
    open_price: int = 0
    high_price: int = 0
    low_price: int = 0
    volume: float = 0.0
    quote_volume: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "MiniTickerEvent":
        data = data or {}
        return cls(
            event_type=_str(data.get("e")),
            event_time=_int(data.get("E")),
            symbol=_str(data.get("s")),
            last_price=parse_fixed8(data.get("c")),
            open_price=parse_fixed8(data.get("o")),
            high_price=parse_fixed8(data.get("h")),
            low_price=parse_fixed8(data.get("l")),
            volume=parse_double(data.get("v")),
            quote_volume=parse_double(data.get("q")),
        )