import base64
import json
import queue
import time

import pytest

from bncdex.jsonrpc_ws import RPCError
from bncdex.rpc_types import ResultBroadcastTxCommit
from bncdex.ws_events import WSEvents


class FakeConn:
    def __init__(self, node):
        self.node = node
        self.inbox = queue.Queue()
        self.requests = []

    def settimeout(self, value):
        pass

    def send(self, text):
        request = json.loads(text)
        self.requests.append(request)
        self.node.requests.append(request)
        for reply in self.node.replies(request):
            self.inbox.put(json.dumps(reply))

    def push(self, message):
        self.inbox.put(json.dumps(message))

    def recv(self):
        item = self.inbox.get()
        if item is None:
            raise ConnectionError("closed")
        return item

    def send_close(self):
        pass

    def close(self):
        self.inbox.put(None)


class FakeNode:
    def __init__(self):
        self.urls = []
        self.connections = []
        self.requests = []
        self.results = {}
        self.errors = {}
        self.silent = set()

    def connect(self, url):
        self.urls.append(url)
        conn = FakeConn(self)
        self.connections.append(conn)
        return conn

    def replies(self, request):
        method = request["method"]
        if method in self.silent:
            return []
        base = {"jsonrpc": "2.0", "id": request["id"]}
        if method in self.errors:
            return [dict(base, error=self.errors[method])]
        result = self.results.get(method, {"method": method, "params": request["params"]})
        return [dict(base, result=result)]


def wait_until(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        value = predicate()
        if value:
            return value
        time.sleep(0.01)
    return predicate()


def find_request(node, method):
    return next((r for r in node.requests if r["method"] == method), None)


@pytest.fixture
def node():
    return FakeNode()


@pytest.fixture
def events(node):
    ev = WSEvents(
        "tcp://node.example:26657",
        "/websocket",
        timeout=1.0,
        connect=node.connect,
        alive_check_period=0.05,
        dial_period=0.05,
    )
    ev.start()
    yield ev
    ev.stop()


def test_connects_to_websocket_url(events, node):
    assert node.urls[0] == "ws://node.example:26657/websocket"
    assert events.is_active() is True


def test_status_returns_result(events, node):
    node.results["status"] = {"node_info": {"network": "test-chain"}}
    assert events.status() == {"node_info": {"network": "test-chain"}}
    assert find_request(node, "status")["params"] == {}
    assert events.pending_requests() == 0


def test_abci_query_params(events, node):
    result = events.abci_query_with_options("/a", b"\x0a\xff", 5, True)
    assert result["params"] == {"path": "/a", "data": "0AFF", "height": "5", "prove": True}


def test_abci_query_without_data_sends_empty_hex(events):
    result = events.abci_query_with_options("/b")
    assert result["params"]["data"] == ""


def test_block_with_no_height_sends_null(events):
    assert events.block(None)["params"] == {"height": None}


def test_broadcast_tx_encodes_base64(events):
    result = events.broadcast_tx("broadcast_tx_sync", b"\x01\x02")
    assert result["method"] == "broadcast_tx_sync"
    assert base64.b64decode(result["params"]["tx"]) == b"\x01\x02"


def test_rpc_error_is_raised(events, node):
    node.errors["health"] = {"code": -32603, "message": "Internal error", "data": "boom"}
    with pytest.raises(RPCError) as info:
        events.health()
    assert info.value.code == -32603
    assert info.value.data == "boom"


def test_timeout_raises_and_clears_pending(events, node):
    node.silent.add("net_info")
    events.set_timeout(0.2)
    with pytest.raises(TimeoutError):
        events.net_info()
    assert events.pending_requests() == 0


def test_broadcast_tx_commit_complements_tags(events, node):
    tags = [{"key": "YQ==", "value": "Yg=="}]
    node.results["broadcast_tx_commit"] = {
        "check_tx": {"code": 0, "tags": tags},
        "deliver_tx": {"code": 3, "log": "failed"},
        "hash": "ABCD",
        "height": "12",
    }
    result = events.broadcast_tx_commit(b"tx")
    assert isinstance(result, ResultBroadcastTxCommit)
    assert result.height == 12
    assert result.hash == bytes.fromhex("ABCD")
    assert result.check_tx.events == [{"type": "", "attributes": tags}]
    assert result.deliver_tx.code == 3
    assert result.deliver_tx.log == "failed"


def test_tx_search_parses_results(events, node):
    node.results["tx_search"] = {
        "txs": [{"hash": "00FF", "height": "7", "tx_result": {"code": 0}}],
        "total_count": "1",
    }
    result = events.tx_search("tx.height=7", False, 1, 30)
    assert result.total_count == 1
    assert result.txs[0].height == 7
    request = find_request(node, "tx_search")
    assert request["params"]["query"] == "tx.height=7"
    assert request["params"]["per_page"] == "30"


def test_subscribe_delivers_events_and_ignores_ack(events, node):
    query = "tm.event='Tx'"
    out = events.subscribe(query)
    request = wait_until(lambda: find_request(node, "subscribe"))
    assert request["params"] == {"query": query}
    payload = {"query": query, "data": {"value": 1}}
    node.connections[-1].push({"jsonrpc": "2.0", "id": request["id"] + "#event", "result": payload})
    assert out.get(timeout=2) == payload


def test_subscribe_twice_raises(events):
    events.subscribe("q1")
    with pytest.raises(ValueError, match="already subscribe"):
        events.subscribe("q1")


def test_unsubscribe_releases_query(events, node):
    events.subscribe("q2")
    assert events.pending_requests() == 1
    events.unsubscribe("q2")
    assert events.pending_requests() == 0
    request = wait_until(lambda: find_request(node, "unsubscribe"))
    assert request["id"] == ""
    assert request["params"] == {"query": "q2"}
    out = events.subscribe("q2")
    assert out.empty()
    assert events.pending_requests() == 1


def test_unsubscribe_all_clears_everything(events, node):
    events.subscribe("a")
    events.subscribe("b")
    events.unsubscribe_all()
    assert events.pending_requests() == 0
    request = wait_until(lambda: find_request(node, "unsubscribe_all"))
    assert request["params"] == {}


def test_reconnect_redoes_subscriptions(events, node):
    events.subscribe("q3")
    first = wait_until(lambda: find_request(node, "subscribe"))
    node.connections[0].close()
    assert wait_until(lambda: len(node.connections) >= 2)
    second = wait_until(
        lambda: next((r for r in node.connections[1].requests if r["method"] == "subscribe"), None)
    )
    assert second["id"] == first["id"]
    assert second["params"] == {"query": "q3"}
    assert wait_until(events.is_active) is True


def test_stop_makes_inactive(events):
    events.stop()
    assert events.is_active() is False


def test_start_twice_raises(events):
    with pytest.raises(RuntimeError):
        events.start()