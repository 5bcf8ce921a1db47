import pytest

from bncdex import validate as v
from bncdex.validate import ValidationError


def test_abci_path_boundary():
    v.validate_abci_path("a" * 1024)
    with pytest.raises(ValidationError, match="abci path exceed max length 1024"):
        v.validate_abci_path("a" * 1025)


def test_abci_data_reports_path_message():
    v.validate_abci_data(None)
    v.validate_abci_data(b"x" * (1024 * 1024))
    with pytest.raises(ValidationError) as info:
        v.validate_abci_data(b"x" * (1024 * 1024 + 1))
    assert str(info.value) == v.EXCEED_ABCI_PATH_LENGTH


def test_tx_length():
    v.validate_tx(b"\x00" * (1024 * 1024))
    with pytest.raises(ValidationError, match="tx data exceed"):
        v.validate_tx(b"\x00" * (1024 * 1024 + 1))


@pytest.mark.parametrize(
    "limit, message",
    [(-1, "the limit can't be negative"), (101, "exceed max limit 100")],
)
def test_unconfirmed_limit_errors(limit, message):
    with pytest.raises(ValidationError, match=message):
        v.validate_unconfirmed_txs_limit(limit)


@pytest.mark.parametrize("limit", [0, 50, 100])
def test_unconfirmed_limit_ok(limit):
    assert v.validate_unconfirmed_txs_limit(limit) is None


def test_height_range():
    assert v.validate_height_range(3, 3) is None
    with pytest.raises(ValidationError, match="can't be negative"):
        v.validate_height_range(-1, 5)
    with pytest.raises(ValidationError, match="can't be negative"):
        v.validate_height_range(1, -5)
    with pytest.raises(ValidationError, match="larger than max height"):
        v.validate_height_range(6, 5)


def test_height():
    assert v.validate_height(None) is None
    assert v.validate_height(0) is None
    with pytest.raises(ValidationError, match="height can't be negative"):
        v.validate_height(-1)


@pytest.mark.parametrize("size", [0, 31, 33])
def test_hash_wrong_length(size):
    with pytest.raises(ValidationError, match="not 32"):
        v.validate_hash(b"\x01" * size)


def test_hash_right_length():
    assert v.validate_hash(b"\x01" * 32) is None


def test_query_strings():
    v.validate_abci_query_str("q" * 1024)
    v.validate_tx_search_query_str("q" * 1024)
    with pytest.raises(ValidationError, match="query string exceed"):
        v.validate_abci_query_str("q" * 1025)
    with pytest.raises(ValidationError, match="query string exceed"):
        v.validate_tx_search_query_str("q" * 1025)


def test_offset_and_limit():
    assert v.validate_offset(0) is None
    assert v.validate_limit(0) is None
    with pytest.raises(ValidationError, match="offset can't be less than 0"):
        v.validate_offset(-1)
    with pytest.raises(ValidationError, match="limit can't be negative"):
        v.validate_limit(-1)


@pytest.mark.parametrize("symbol", ["AB", "A" * 15, ""])
def test_symbol_out_of_range(symbol):
    with pytest.raises(ValidationError, match=r"range \[3,14\]"):
        v.validate_symbol(symbol)


@pytest.mark.parametrize("symbol", ["BNB", "A" * 14])
def test_symbol_in_range(symbol):
    assert v.validate_symbol(symbol) is None


@pytest.mark.parametrize("pair", ["BNBBTC", "BNB_BTC_ETH", ""])
def test_pair_format(pair):
    with pytest.raises(ValidationError, match="symbol1_symbol2"):
        v.validate_pair(pair)


def test_pair_checks_each_symbol():
    assert v.validate_pair("BNB_BTC.B-918") is None
    with pytest.raises(ValidationError, match="length of symbol"):
        v.validate_pair("BN_BTC")


def test_depth_level():
    assert v.validate_depth_level(0) is None
    assert v.validate_depth_level(1000) is None
    with pytest.raises(ValidationError, match=r"\[0, 1000\]"):
        v.validate_depth_level(1001)
    with pytest.raises(ValidationError, match=r"\[0, 1000\]"):
        v.validate_depth_level(-1)