"""Subscriptions to the exchange's websocket event streams."""

from __future__ import annotations

import json
import threading
from typing import Any, Callable, Iterable, Optional, Union

from .account_events import AccountEvent, OrderEvent, TradeEvent
from .market_events import (
    BlockHeightEvent,
    KlineEvent,
    KlineInterval,
    MarketDeltaEvent,
    MarketDepthEvent,
)
from .ticker_events import MiniTickerEvent, TickerEvent

ErrorHandler = Optional[Callable[[BaseException], None]]
CloseHandler = Optional[Callable[[], None]]


def _combine_symbol(base_asset: str, quote_asset: str) -> str:
    return f"{base_asset}_{quote_asset}"


def _one(cls) -> Callable[[bytes], Any]:
    def construct(payload: bytes) -> Any:
        data = json.loads(payload)
        if data is not None and not isinstance(data, dict):
            raise ValueError(f"expected an object for {cls.__name__}")
        return cls.from_dict(data)

    return construct


def _many(cls) -> Callable[[bytes], Any]:
    def construct(payload: bytes) -> list:
        data = json.loads(payload)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValueError(f"expected a list of {cls.__name__}")
        events = []
        for item in data:
            if item is None:
                events.append(None)
            elif isinstance(item, dict):
                events.append(cls.from_dict(item))
            else:
                raise ValueError(f"expected an object for {cls.__name__}")
        return events

    return construct


def _lenient(construct: Callable[[bytes], Any]) -> Callable[[bytes], Any]:
    """Drop payloads of another shape; a user stream mixes accounts and orders."""

    def wrapped(payload: bytes) -> Any:
        try:
            return construct(payload)
        except (ValueError, TypeError):
            return None

    return wrapped


class StreamClient:
    """Subscribes callbacks to streams opened through a :class:`BasicClient`."""

    def __init__(self, base_client) -> None:
        self._base = base_client

    def subscribe_event(
        self,
        quit: Optional[threading.Event],
        messages: Iterable[Any],
        on_receive: Callable[[Any], None],
        on_error: ErrorHandler = None,
        on_close: CloseHandler = None,
    ) -> None:
        """Dispatch stream messages until the stream ends, fails or ``quit`` is set."""
        for message in messages:
            if quit is not None and quit.is_set():
                return
            if isinstance(message, BaseException):
                if on_error is not None:
                    on_error(message)
                return
            on_receive(message)
        if quit is not None and quit.is_set():
            return
        if on_close is not None:
            on_close()

    def _subscribe(
        self,
        path: str,
        construct: Callable[[bytes], Any],
        quit: Optional[threading.Event],
        on_receive: Callable[[Any], None],
        on_error: ErrorHandler,
        on_close: CloseHandler,
    ) -> threading.Thread:
        if quit is None:
            quit = threading.Event()
        messages = self._base.ws_get(path, construct, quit)
        thread = threading.Thread(
            target=self.subscribe_event,
            args=(quit, messages, on_receive, on_error, on_close),
            daemon=True,
        )
        thread.start()
        return thread

    def subscribe_account_event(self, user_addr, quit, on_receive, on_error=None, on_close=None):
        return self._subscribe(
            user_addr, _lenient(_one(AccountEvent)), quit, on_receive, on_error, on_close
        )

    def subscribe_block_height_event(self, quit, on_receive, on_error=None, on_close=None):
        return self._subscribe(
            "$all@blockheight", _one(BlockHeightEvent), quit, on_receive, on_error, on_close
        )

    def subscribe_kline_event(
        self,
        base_asset: str,
        quote_asset: str,
        interval: Union[KlineInterval, str],
        quit,
        on_receive,
        on_error=None,
        on_close=None,
    ):
        interval = KlineInterval(interval).value
        path = f"{_combine_symbol(base_asset, quote_asset)}@kline_{interval}"
        return self._subscribe(path, _one(KlineEvent), quit, on_receive, on_error, on_close)

    def subscribe_market_diff_event(
        self, base_asset, quote_asset, quit, on_receive, on_error=None, on_close=None
    ):
        path = f"{_combine_symbol(base_asset, quote_asset)}@marketDiff"
        return self._subscribe(
            path, _one(MarketDeltaEvent), quit, on_receive, on_error, on_close
        )

    def subscribe_market_depth_event(
        self, base_asset, quote_asset, quit, on_receive, on_error=None, on_close=None
    ):
        path = f"{_combine_symbol(base_asset, quote_asset)}@marketDepth"
        return self._subscribe(
            path, _one(MarketDepthEvent), quit, on_receive, on_error, on_close
        )

    def subscribe_order_event(self, user_addr, quit, on_receive, on_error=None, on_close=None):
        return self._subscribe(
            user_addr, _lenient(_many(OrderEvent)), quit, on_receive, on_error, on_close
        )

    def subscribe_ticker_event(
        self, base_asset, quote_asset, quit, on_receive, on_error=None, on_close=None
    ):
        path = f"{_combine_symbol(base_asset, quote_asset)}@ticker"
        return self._subscribe(path, _one(TickerEvent), quit, on_receive, on_error, on_close)

    def subscribe_all_ticker_event(self, quit, on_receive, on_error=None, on_close=None):
        return self._subscribe(
            "$all@allTickers", _many(TickerEvent), quit, on_receive, on_error, on_close
        )

    def subscribe_mini_ticker_event(
        self, base_asset, quote_asset, quit, on_receive, on_error=None, on_close=None
    ):
        path = f"{_combine_symbol(base_asset, quote_asset)}@miniTicker"
        return self._subscribe(
            path, _one(MiniTickerEvent), quit, on_receive, on_error, on_close
        )

    def subscribe_all_mini_tickers_event(self, quit, on_receive, on_error=None, on_close=None):
        return self._subscribe(
            "$all@allMiniTickers", _many(MiniTickerEvent), quit, on_receive, on_error, on_close
        )

    def subscribe_trade_event(
        self, base_asset, quote_asset, quit, on_receive, on_error=None, on_close=None
    ):
        path = f"{_combine_symbol(base_asset, quote_asset)}@trades"
        return self._subscribe(path, _many(TradeEvent), quit, on_receive, on_error, on_close)