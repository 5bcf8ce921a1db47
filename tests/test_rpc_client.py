import base64
import json
import queue

import pytest

from bncdex.jsonrpc_ws import RPCError
from bncdex.rpc_client import RPCClient, new_rpc_client
from bncdex.validate import ValidationError


class FakeConnection:
    def __init__(self, handler):
        self.handler = handler
        self.sent = []
        self._inbox = queue.Queue()

    def settimeout(self, timeout):
        pass

    def send(self, text):
        request = json.loads(text)
        self.sent.append(request)
        reply = {"jsonrpc": "2.0", "id": request["id"]}
        reply.update(self.handler(request))
        self._inbox.put(json.dumps(reply))

    def recv(self):
        item = self._inbox.get()
        if item is None:
            raise ConnectionError("closed")
        return item

    def close(self):
        self._inbox.put(None)

    def send_close(self):
        pass


def _started(handler):
    conn = FakeConnection(handler)
    client = RPCClient("tcp://127.0.0.1:26657", connect=lambda url: conn)
    client.start()
    return client, conn


def _abci(code=0, log="", value=None):
    response = {"code": code, "log": log}
    if value is not None:
        response["value"] = base64.b64encode(value).decode()
    return {"result": {"response": response}}


def test_query_store_returns_value_and_sends_path():
    client, conn = _started(lambda req: _abci(value=b"hello"))
    try:
        assert client.query_store(b"\x01\x02", "acc") == b"hello"
        params = conn.sent[-1]["params"]
        assert conn.sent[-1]["method"] == "abci_query"
        assert params["path"] == "/store/acc/key"
        assert params["data"] == "0102"
        assert params["prove"] is False
    finally:
        client.stop()


def test_query_store_raises_on_error_code():
    client, _ = _started(lambda req: _abci(code=1, log="bad query"))
    try:
        with pytest.raises(RPCError, match="bad query"):
            client.query_store(b"\x01", "acc")
    finally:
        client.stop()


def test_get_stake_validators_decodes_json_value():
    validators = [{"operator_address": "op1"}]
    client, conn = _started(lambda req: _abci(value=json.dumps(validators).encode()))
    try:
        assert client.get_stake_validators() == validators
        assert conn.sent[-1]["params"]["path"] == "custom/stake/validators"
    finally:
        client.stop()


def test_broadcast_tx_async_uses_route():
    client, conn = _started(lambda req: {"result": {"code": 0, "hash": "AB"}})
    try:
        result = client.broadcast_tx_async(b"\x05")
        assert result == {"code": 0, "hash": "AB"}
        assert conn.sent[-1]["method"] == "broadcast_tx_async"
        assert conn.sent[-1]["params"]["tx"] == base64.b64encode(b"\x05").decode()
    finally:
        client.stop()


def test_tx_returns_complemented_result():
    reply = {
        "result": {
            "hash": "ABCD",
            "height": "7",
            "tx_result": {"tags": [{"key": "k", "value": "v"}]},
        }
    }
    client, conn = _started(lambda req: reply)
    try:
        result = client.tx(bytes(32), False)
        assert result.height == 7
        assert result.hash == b"\xab\xcd"
        assert result.tx_result.events[0]["attributes"] == [{"key": "k", "value": "v"}]
        assert conn.sent[-1]["method"] == "tx"
    finally:
        client.stop()


@pytest.mark.parametrize(
    "call",
    [
        lambda c: c.abci_query("p" * 1025),
        lambda c: c.abci_query("path", b"\x00" * (1024 * 1024 + 1)),
        lambda c: c.broadcast_tx_commit(b"\x00" * (1024 * 1024 + 1)),
        lambda c: c.broadcast_tx_sync(b"\x00" * (1024 * 1024 + 1)),
        lambda c: c.unconfirmed_txs(101),
        lambda c: c.unconfirmed_txs(-1),
        lambda c: c.blockchain_info(5, 3),
        lambda c: c.blockchain_info(-1, 3),
        lambda c: c.block(-1),
        lambda c: c.block_results(-1),
        lambda c: c.commit(-1),
        lambda c: c.validators(-1),
        lambda c: c.tx(b"\x00" * 31, False),
        lambda c: c.tx_search("q" * 1025, False, 1, 10),
    ],
)
def test_invalid_arguments_raise_before_sending(call):
    client = RPCClient("tcp://127.0.0.1:26657")
    with pytest.raises(ValidationError):
        call(client)
    assert client.pending_requests() == 0


def test_valid_call_on_unstarted_client_raises_runtime_error():
    client = RPCClient("tcp://127.0.0.1:26657")
    with pytest.raises(RuntimeError):
        client.block(1)


def test_new_rpc_client_starts_dialing_unreachable_node():
    client = new_rpc_client("tcp://127.0.0.1:1")
    try:
        assert client.endpoint == "/websocket"
        assert client.is_active() is False
    finally:
        client.stop()