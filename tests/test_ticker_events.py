import pytest

from bncdex.market_events import parse_double, parse_fixed8
from bncdex.ticker_events import MiniTickerEvent, TickerEvent

TICKER = {
    "e": "24hrTicker",
    "E": 123456789,
    "s": "BNBBTC",
    "p": "0.0015",
    "P": "250.00",
    "w": "0.0018",
    "x": "0.0009",
    "c": "0.0025",
    "Q": "10",
    "b": "0.0024",
    "B": "10",
    "a": "0.0026",
    "A": "100",
    "o": "0.0010",
    "h": "0.0025",
    "l": "0.0010",
    "v": "10000",
    "q": "18",
    "O": 0,
    "C": 86400000,
    "F": 0,
    "L": 18150,
    "n": 18151,
}


def test_ticker_event_prices():
    event = TickerEvent.from_dict(TICKER)
    assert event.event_type == "24hrTicker"
    assert event.symbol == "BNBBTC"
    assert event.price_change == parse_fixed8("0.0015")
    assert event.price_change_percent == parse_fixed8("250.00")
    assert event.weighted_avg_price == parse_fixed8("0.0018")
    assert event.prev_close_price == parse_fixed8("0.0009")
    assert event.last_price == parse_fixed8("0.0025")
    assert event.bid_price == parse_fixed8("0.0024")
    assert event.ask_quantity == parse_fixed8("100")
    assert event.high_price == event.last_price
    assert event.low_price == event.open_price


def test_ticker_event_counts_and_ids():
    event = TickerEvent.from_dict(TICKER)
    assert event.volume == parse_double("10000")
    assert event.quote_volume == parse_double("18")
    assert event.open_time == 0
    assert event.close_time == 86400000
    assert event.first_id == "0"
    assert event.last_id == "18150"
    assert event.count == 18151


def test_ticker_event_empty():
    assert TickerEvent.from_dict({}) == TickerEvent()


def test_ticker_event_bad_volume():
    with pytest.raises(ValueError):
        TickerEvent.from_dict({"v": "lots"})


def test_mini_ticker_event():
    event = MiniTickerEvent.from_dict(
        {
            "e": "24hrMiniTicker",
            "E": 123456789,
            "s": "BNBBTC",
            "c": "0.0025",
            "o": "0.0010",
            "h": "0.0025",
            "l": "0.0010",
            "v": "10000",
            "q": "18",
        }
    )
    assert event.event_type == "24hrMiniTicker"
    assert event.event_time == 123456789
    assert event.last_price == parse_fixed8("0.0025")
    assert event.open_price == parse_fixed8("0.0010")
    assert event.high_price == event.last_price
    assert event.low_price == event.open_price
    assert event.volume == parse_double("10000")
    assert event.quote_volume == parse_double("18")


def test_mini_ticker_event_none():
    assert MiniTickerEvent.from_dict(None) == MiniTickerEvent()