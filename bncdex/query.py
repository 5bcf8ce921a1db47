"""Read-only queries against the exchange's REST API."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from .http_client import APIError, BasicClient

ADDRESS_MISSING = "address is missing"
ORDER_ID_MISSING = "order id is missing"
KLINE_SCHEME_UNEXPECTED = "Receive kline scheme is unexpected "

KLINE_FIELDS = (
    "openTime",
    "open",
    "high",
    "low",
    "close",
    "volume",
    "closeTime",
    "quoteAssetVolume",
    "NumberOfTrades",
)

_NOT_FOUND = 404


def _query_params(params: Optional[Mapping[str, Any]]) -> dict[str, str]:
    """Turn a mapping of query values into strings, dropping unset ones."""
    result: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            result[key] = "true" if value else "false"
        else:
            result[key] = str(value)
    return result


class QueryClient:
    """Market, account and order queries built on a :class:`BasicClient`."""

    def __init__(self, base_client: BasicClient) -> None:
        self._base = base_client

    def _get_json(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return json.loads(self._base.get(path, _query_params(params)))

    def get_account(self, address: str) -> dict:
        """Return an account's balances; an unknown account comes back empty."""
        if not address:
            raise ValueError(ADDRESS_MISSING)
        try:
            return self._get_json("/account/" + address)
        except APIError as exc:
            if exc.status_code == _NOT_FOUND:
                return {}
            raise

    def get_closed_orders(self, params: Optional[Mapping[str, Any]]) -> dict:
        return self._get_json("/orders/closed", params)

    def get_depth(self, params: Optional[Mapping[str, Any]]) -> dict:
        return self._get_json("/depth", params)

    def get_klines(self, params: Optional[Mapping[str, Any]]) -> list[dict]:
        """Return candlesticks as dictionaries keyed by field name."""
        rows = self._get_json("/klines", params)
        if not isinstance(rows, list):
            raise ValueError(KLINE_SCHEME_UNEXPECTED)
        klines = []
        for row in rows:
            if not isinstance(row, list) or len(row) < len(KLINE_FIELDS):
                raise ValueError(KLINE_SCHEME_UNEXPECTED)
            klines.append(dict(zip(KLINE_FIELDS, row)))
        return klines

    def get_markets(self, params: Optional[Mapping[str, Any]]) -> list:
        return self._get_json("/markets", params)

    def get_node_info(self) -> dict:
        return self._get_json("/node-info")

    def get_order(self, order_id: str) -> dict:
        if not order_id:
            raise ValueError(ORDER_ID_MISSING)
        return self._get_json("/orders/" + order_id)

    def get_open_orders(self, params: Optional[Mapping[str, Any]]) -> dict:
        return self._get_json("/orders/open", params)

    def get_ticker24h(self, params: Optional[Mapping[str, Any]] = None) -> list:
        return self._get_json("/ticker/24hr", params)

    def get_time(self) -> dict:
        return self._get_json("/time")

    def get_tokens(self, params: Optional[Mapping[str, Any]] = None) -> list:
        return self._get_json("/tokens", params)

    def get_trades(self, params: Optional[Mapping[str, Any]]) -> dict:
        return self._get_json("/trades", params)