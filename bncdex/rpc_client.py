"""Node RPC client: validated calls over the websocket connection, plus store queries."""

from __future__ import annotations

import base64
import json
from typing import Any, Optional

from .jsonrpc_ws import RPCError
from .rpc_types import ResultBlockResults, ResultBroadcastTxCommit, ResultTx, ResultTxSearch
from .validate import (
    validate_abci_data,
    validate_abci_path,
    validate_abci_query_str,
    validate_hash,
    validate_height,
    validate_height_range,
    validate_tx,
    validate_unconfirmed_txs_limit,
)
from .ws_events import WSEvents

DEFAULT_WS_ENDPOINT = "/websocket"
DEFAULT_QUERY_HEIGHT = 0
DEFAULT_QUERY_PROVE = False


def _response_of(result: Any) -> dict:
    if isinstance(result, dict):
        response = result.get("response")
        if isinstance(response, dict):
            return response
    return {}


def _value_of(response: dict) -> Optional[bytes]:
    value = response.get("value")
    if value is None:
        return None
    return base64.b64decode(value)


def _raise_unless_ok(response: dict) -> None:
    code = int(response.get("code") or 0)
    if code != 0:
        raise RPCError(code, str(response.get("log") or ""))


class RPCClient(WSEvents):
    """Client for a node's RPC interface that checks arguments before sending."""

    def __init__(self, remote: str, endpoint: str = DEFAULT_WS_ENDPOINT, **options: Any) -> None:
        super().__init__(remote, endpoint, **options)

    def abci_query(self, path: str, data: Optional[bytes] = None) -> Any:
        """Run an ABCI query at the latest height without a proof."""
        return self.abci_query_with_options(path, data, DEFAULT_QUERY_HEIGHT, DEFAULT_QUERY_PROVE)

    def abci_query_with_options(
        self,
        path: str,
        data: Optional[bytes] = None,
        height: int = DEFAULT_QUERY_HEIGHT,
        prove: bool = DEFAULT_QUERY_PROVE,
    ) -> Any:
        validate_abci_path(path)
        validate_abci_data(data)
        return super().abci_query_with_options(path, data, height, prove)

    def broadcast_tx_commit(self, tx: bytes) -> ResultBroadcastTxCommit:
        validate_tx(tx)
        return super().broadcast_tx_commit(tx)

    def broadcast_tx_async(self, tx: bytes) -> Any:
        validate_tx(tx)
        return self.broadcast_tx("broadcast_tx_async", tx)

    def broadcast_tx_sync(self, tx: bytes) -> Any:
        validate_tx(tx)
        return self.broadcast_tx("broadcast_tx_sync", tx)

    def unconfirmed_txs(self, limit: int) -> Any:
        validate_unconfirmed_txs_limit(limit)
        return super().unconfirmed_txs(limit)

    def blockchain_info(self, min_height: int, max_height: int) -> Any:
        validate_height_range(min_height, max_height)
        return super().blockchain_info(min_height, max_height)

    def block(self, height: Optional[int] = None) -> Any:
        validate_height(height)
        return super().block(height)

    def block_results(self, height: Optional[int] = None) -> ResultBlockResults:
        validate_height(height)
        return super().block_results(height)

    def commit(self, height: Optional[int] = None) -> Any:
        validate_height(height)
        return super().commit(height)

    def tx(self, hash_bytes: bytes, prove: bool = False) -> ResultTx:
        validate_hash(hash_bytes)
        return super().tx(hash_bytes, prove)

    def tx_search(self, query: str, prove: bool, page: int, per_page: int) -> ResultTxSearch:
        validate_abci_query_str(query)
        return super().tx_search(query, prove, page, per_page)

    def validators(self, height: Optional[int] = None) -> Any:
        validate_height(height)
        return super().validators(height)

    def query_store(self, key: bytes, store_name: str) -> Optional[bytes]:
        """Read the raw value stored under ``key`` in the named store."""
        result = self.abci_query(f"/store/{store_name}/key", key)
        response = _response_of(result)
        _raise_unless_ok(response)
        return _value_of(response)

    def get_stake_validators(self) -> Any:
        """Return the staking validators as decoded JSON."""
        response = _response_of(self.abci_query("custom/stake/validators"))
        return json.loads(_value_of(response) or b"")

    def get_delegator_unbonding_delegations(self, delegator_addr: str) -> Any:
        """Return a delegator's unbonding delegations as decoded JSON."""
        params = json.dumps({"DelegatorAddr": delegator_addr}).encode()
        response = _response_of(
            self.abci_query("custom/stake/delegatorUnbondingDelegations", params)
        )
        return json.loads(_value_of(response) or b"")


def new_rpc_client(node_uri: str) -> RPCClient:
    """Create and start a client for the node at ``node_uri``."""
    client = RPCClient(node_uri, DEFAULT_WS_ENDPOINT)
    client.start()
    return client