"""Argument checks applied before requests are sent to a node."""

from __future__ import annotations

from typing import Optional

MAX_ABCI_PATH_LENGTH = 1024
MAX_ABCI_DATA_LENGTH = 1024 * 1024
MAX_TX_LENGTH = 1024 * 1024
MAX_ABCI_QUERY_STR_LENGTH = 1024
MAX_TX_SEARCH_STR_LENGTH = 1024
MAX_UNCONFIRMED_TXS = 100
MAX_DEPTH_LEVEL = 1000

TOKEN_SYMBOL_MAX_LEN = 14
TOKEN_SYMBOL_MIN_LEN = 3

HASH_SIZE = 32

EXCEED_ABCI_PATH_LENGTH = f"the abci path exceed max length {MAX_ABCI_PATH_LENGTH} "
EXCEED_ABCI_DATA_LENGTH = f"the abci data exceed max length {MAX_ABCI_DATA_LENGTH} "
EXCEED_TX_LENGTH = f"the tx data exceed max length {MAX_TX_LENGTH} "
LIMIT_NEGATIVE = "the limit can't be negative"
EXCEED_MAX_UNCONFIRMED_TXS = (
    f"the limit of unConfirmed tx exceed max limit {MAX_UNCONFIRMED_TXS} "
)
HEIGHT_NEGATIVE = "the height can't be negative"
MAX_MIN_HEIGHT_CONFLICT = "the min height can't be larger than max height"
HASH_LENGTH = "the length of hash is not 32"
EXCEED_ABCI_QUERY_STR_LENGTH = f"the query string exceed max length {MAX_ABCI_PATH_LENGTH} "
EXCEED_TX_SEARCH_QUERY_STR_LENGTH = (
    f"the query string exceed max length {MAX_TX_SEARCH_STR_LENGTH} "
)
OFFSET_NEGATIVE = "offset can't be less than 0"
SYMBOL_LENGTH_OUT_OF_RANGE = (
    f"length of symbol should be in range [{TOKEN_SYMBOL_MIN_LEN},{TOKEN_SYMBOL_MAX_LEN}]"
)
PAIR_FORMAT = "the pair should in format 'symbol1_symbol2'"
DEPTH_LEVEL_OUT_OF_RANGE = f"the level is out of range [0, {MAX_DEPTH_LEVEL}]"


class ValidationError(ValueError):
    """Raised when an argument fails a pre-request check."""


def validate_abci_path(path: str) -> None:
    if len(path) > MAX_ABCI_PATH_LENGTH:
        raise ValidationError(EXCEED_ABCI_PATH_LENGTH)


def validate_abci_data(data: Optional[bytes]) -> None:
    # Oversized data is reported with the path-length message.
    if len(data or b"") > MAX_ABCI_DATA_LENGTH:
        raise ValidationError(EXCEED_ABCI_PATH_LENGTH)


def validate_tx(tx: bytes) -> None:
    if len(tx) > MAX_TX_LENGTH:
        raise ValidationError(EXCEED_TX_LENGTH)


def validate_unconfirmed_txs_limit(limit: int) -> None:
    if limit < 0:
        raise ValidationError(LIMIT_NEGATIVE)
    if limit > MAX_UNCONFIRMED_TXS:
        raise ValidationError(EXCEED_MAX_UNCONFIRMED_TXS)


def validate_height_range(min_height: int, max_height: int) -> None:
    if min_height < 0 or max_height < 0:
        raise ValidationError(HEIGHT_NEGATIVE)
    if min_height > max_height:
        raise ValidationError(MAX_MIN_HEIGHT_CONFLICT)


def validate_height(height: Optional[int]) -> None:
    if height is not None and height < 0:
        raise ValidationError(HEIGHT_NEGATIVE)


def validate_hash(hash_bytes: bytes) -> None:
    if len(hash_bytes) != HASH_SIZE:
        raise ValidationError(HASH_LENGTH)


def validate_abci_query_str(query: str) -> None:
    if len(query) > MAX_ABCI_QUERY_STR_LENGTH:
        raise ValidationError(EXCEED_ABCI_QUERY_STR_LENGTH)


def validate_tx_search_query_str(query: str) -> None:
    if len(query) > MAX_TX_SEARCH_STR_LENGTH:
        raise ValidationError(EXCEED_TX_SEARCH_QUERY_STR_LENGTH)


def validate_offset(offset: int) -> None:
    if offset < 0:
        raise ValidationError(OFFSET_NEGATIVE)


def validate_limit(limit: int) -> None:
    if limit < 0:
        raise ValidationError(LIMIT_NEGATIVE)


def validate_symbol(symbol: str) -> None:
    if not TOKEN_SYMBOL_MIN_LEN <= len(symbol) <= TOKEN_SYMBOL_MAX_LEN:
        raise ValidationError(SYMBOL_LENGTH_OUT_OF_RANGE)


def validate_pair(pair: str) -> None:
    symbols = pair.split("_")
    if len(symbols) != 2:
        raise ValidationError(PAIR_FORMAT)
    for symbol in symbols:
        validate_symbol(symbol)


def validate_depth_level(level: int) -> None:
    if level < 0 or level > MAX_DEPTH_LEVEL:
        raise ValidationError(DEPTH_LEVEL_OUT_OF_RANGE)