"""Market data events pushed over the websocket streams."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

FIXED8_SCALE = 10**8


def parse_fixed8(value: Any) -> int:
    """Parse a decimal amount into an integer count of 1e-8 units."""
    if value is None or value == "":
        return 0
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"invalid fixed8 value {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"invalid fixed8 value {value!r}")
    return int(amount * FIXED8_SCALE)


def parse_double(value: Any) -> float:
    """Parse a floating amount sent as a number or a string."""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid double value {value!r}") from exc


def _int(value: Any) -> int:
    return 0 if value is None else int(value)


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _levels(value: Optional[list]) -> list[list[int]]:
    return [[parse_fixed8(item) for item in level] for level in value or []]


class KlineInterval(str, Enum):
    ONE_MINUTE = "1m"
    FIVE_MINUTES = "5m"
    FIFTEEN_MINUTES = "15m"
    THIRTY_MINUTES = "30m"
    ONE_HOUR = "1h"
    TWO_HOURS = "2h"
    FOUR_HOURS = "4h"
    SIX_HOURS = "6h"
    EIGHT_HOURS = "8h"
    TWELVE_HOURS = "12h"
    ONE_DAY = "1d"
    THREE_DAYS = "3d"
    ONE_WEEK = "1w"
    ONE_MONTH = "1M"


@dataclass
class BlockHeightEvent:
    block_height: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "BlockHeightEvent":
        data = data or {}
        return cls(block_height=_int(data.get("h")))


@dataclass
class KlineRecordEvent:
    symbol: str = ""
    open_time: int = 0
    close_time: int = 0
    interval: str = ""
    first_trade_id: str = ""
    last_trade_id: str = ""
    open_price: int = 0
    close_price: int = 0
    high_price: int = 0
    low_price: int = 0
    volume: float = 0.0
    quote_asset_volume: float = 0.0
    number_of_trades: int = 0
    closed: bool = False
    timestamp: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "KlineRecordEvent":
        data = data or {}
        return cls(
            symbol=_str(data.get("s")),
            open_time=_int(data.get("t")),
            close_time=_int(data.get("T")),
            interval=_str(data.get("i")),
            first_trade_id=_str(data.get("f")),
            last_trade_id=_str(data.get("L")),
            open_price=parse_fixed8(data.get("o")),
            close_price=parse_fixed8(data.get("c")),
            high_price=parse_fixed8(data.get("h")),
            low_price=parse_fixed8(data.get("l")),
            volume=parse_double(data.get("v")),
            quote_asset_volume=parse_double(data.get("q")),
            number_of_trades=_int(data.get("n")),
            closed=bool(data.get("x", False)),
        )


@dataclass
class KlineEvent:
    event_type: str = ""
    event_time: int = 0
    symbol: str = ""
    kline: KlineRecordEvent = field(default_factory=KlineRecordEvent)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "KlineEvent":
        data = data or {}
        return cls(
            event_type=_str(data.get("e")),
            event_time=_int(data.get("E")),
            symbol=_str(data.get("s")),
            kline=KlineRecordEvent.from_dict(data.get("k")),
        )


@dataclass
class MarketDeltaEvent:
    event_type: str = ""
    event_time: int = 0
    symbol: str = ""
    bids: list = field(default_factory=list)
    asks: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "MarketDeltaEvent":
        data = data or {}
        return cls(
            event_type=_str(data.get("e")),
            event_time=_int(data.get("E")),
            symbol=_str(data.get("s")),
            bids=_levels(data.get("b")),
            asks=_levels(data.get("a")),
        )


@dataclass
class MarketDepthEvent:
    last_update_id: int = 0
    symbol: str = ""
    bids: list = field(default_factory=list)
    asks: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "MarketDepthEvent":
        data = data or {}
        return cls(
            last_update_id=_int(data.get("lastUpdateId")),
            symbol=_str(data.get("symbol")),
            bids=_levels(data.get("bids")),
            asks=_levels(data.get("asks")),
        )