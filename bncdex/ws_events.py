"""Request/response and event subscriptions multiplexed over one node websocket."""

from __future__ import annotations

import functools
import logging
import queue
import threading
import time
from typing import Any, Callable, Optional

from .jsonrpc_ws import (
    DEFAULT_DIAL_PERIOD,
    DEFAULT_TIMEOUT,
    RPCResponse,
    WebSocketRPCClient,
)
from .rpc_types import ResultBlockResults, ResultBroadcastTxCommit, ResultTx, ResultTxSearch

logger = logging.getLogger(__name__)

DEFAULT_ALIVE_CHECK_PERIOD = 1.0
EMPTY_REQUEST = ""
_POLL = 0.05


class WSEvents:
    """Routes JSON-RPC responses and subscription events to their callers.

    A background routine replaces the websocket client when it stops and
    redoes all subscriptions once the new connection is up.
    """

    def __init__(
        self,
        remote: str,
        endpoint: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        connect: Optional[Callable[[str], Any]] = None,
        alive_check_period: float = DEFAULT_ALIVE_CHECK_PERIOD,
        dial_period: float = DEFAULT_DIAL_PERIOD,
    ) -> None:
        self.remote = remote
        self.endpoint = endpoint
        self.timeout = timeout
        self._connect = connect
        self._alive_check_period = alive_check_period
        self._dial_period = dial_period
        self._lock = threading.Lock()
        self._ws: Optional[WebSocketRPCClient] = None
        self._responses: "queue.Queue[RPCResponse]" = queue.Queue()
        self._reconnect: "queue.Queue[WebSocketRPCClient]" = queue.Queue()
        self._response_queues: dict[str, queue.Queue] = {}
        self._subscription_quit: dict[str, threading.Event] = {}
        self._subscription_ids: dict[str, str] = {}
        self._subscription_set: set[str] = set()
        self._quit = threading.Event()
        self._started = False

    def __enter__(self) -> "WSEvents":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    def _new_client(self) -> WebSocketRPCClient:
        client = WebSocketRPCClient(
            self.remote,
            self.endpoint,
            self._responses,
            connect=self._connect,
            dial_period=self._dial_period,
        )
        client.on_dial_success = functools.partial(self._redo_subscriptions, client)
        return client

    def _client(self) -> WebSocketRPCClient:
        with self._lock:
            client = self._ws
        if client is None:
            raise RuntimeError("websocket events are not started")
        return client

    def start(self) -> None:
        """Connect to the node and start the listener and reconnect routines."""
        with self._lock:
            if self._started:
                raise RuntimeError("websocket events already started")
            self._started = True
        client = self._new_client()
        client.start()
        with self._lock:
            self._ws = client
        threading.Thread(target=self._event_listener, daemon=True).start()
        threading.Thread(target=self._reconnect_routine, daemon=True).start()

    def stop(self) -> None:
        self._quit.set()
        with self._lock:
            client = self._ws
        if client is not None:
            client.stop()

    def pending_requests(self) -> int:
        with self._lock:
            return len(self._response_queues)

    def is_active(self) -> bool:
        with self._lock:
            client = self._ws
        return client is not None and client.is_active()

    def set_timeout(self, timeout: float) -> None:
        self.timeout = timeout

    # Subscriptions

    def subscribe(self, query: str, capacity: int = 1) -> "queue.Queue[dict]":
        """Subscribe to ``query``; events arrive on the returned queue."""
        with self._lock:
            if query in self._subscription_ids:
                raise ValueError("already subscribe")
        client = self._client()
        request_id = client.gen_request_id()
        size = max(1, capacity)
        events: "queue.Queue[dict]" = queue.Queue(maxsize=size)
        inbox: "queue.Queue[RPCResponse]" = queue.Queue(maxsize=size)
        with self._lock:
            self._response_queues[request_id] = inbox
            # Registered before sending so the acknowledgement is never taken for an event.
            self._subscription_set.add(request_id)
        try:
            client.subscribe(request_id, query, self.timeout)
        except Exception:
            with self._lock:
                self._response_queues.pop(request_id, None)
                self._subscription_set.discard(request_id)
            raise
        quit_event = threading.Event()
        with self._lock:
            self._subscription_quit[query] = quit_event
            self._subscription_ids[query] = request_id
        threading.Thread(
            target=self._wait_for_event_response,
            args=(request_id, inbox, events, quit_event),
            daemon=True,
        ).start()
        return events

    def unsubscribe(self, query: str) -> None:
        self._client().unsubscribe(EMPTY_REQUEST, query, self.timeout)
        with self._lock:
            request_id = self._subscription_ids.pop(query, None)
            if request_id is not None:
                self._subscription_set.discard(request_id)
                self._response_queues.pop(request_id, None)
            quit_event = self._subscription_quit.pop(query, None)
        if quit_event is not None:
            quit_event.set()

    def unsubscribe_all(self) -> None:
        self._client().unsubscribe_all(EMPTY_REQUEST, self.timeout)
        with self._lock:
            for request_id in self._subscription_ids.values():
                self._response_queues.pop(request_id, None)
            quits = list(self._subscription_quit.values())
            self._subscription_set = set()
            self._subscription_quit = {}
            self._subscription_ids = {}
        for quit_event in quits:
            quit_event.set()

    def _wait_for_event_response(
        self,
        request_id: str,
        inbox: "queue.Queue[RPCResponse]",
        events: "queue.Queue[dict]",
        quit_event: threading.Event,
    ) -> None:
        while not quit_event.is_set() and not self._quit.is_set():
            try:
                response = inbox.get(timeout=_POLL)
            except queue.Empty:
                continue
            if response.error is not None:
                logger.error("receive error from event stream: %s", response.error)
                continue
            if not isinstance(response.result, dict):
                logger.debug("receive unexpected data from event stream: %r", response.result)
                continue
            while not quit_event.is_set() and not self._quit.is_set():
                try:
                    events.put(response.result, timeout=_POLL)
                    break
                except queue.Full:
                    continue
        logger.debug("event stream for request %s finished", request_id)

    # Calls

    def simple_call(self, method: str, params: Optional[dict] = None) -> Any:
        """Send one request and return the decoded ``result`` of its response."""
        client = self._client()
        request_id = client.gen_request_id()
        outbox: "queue.Queue[RPCResponse]" = queue.Queue(maxsize=1)
        with self._lock:
            self._response_queues[request_id] = outbox
        try:
            deadline = time.monotonic() + self.timeout
            client.call(method, request_id, params or {}, self.timeout)
            remaining = max(0.0, deadline - time.monotonic())
            try:
                response = outbox.get(timeout=remaining)
            except queue.Empty:
                self._reconnect.put(client)
                raise TimeoutError("context deadline exceeded") from None
            if response.error is not None:
                raise response.error
            return response.result
        finally:
            with self._lock:
                self._response_queues.pop(request_id, None)

    def status(self) -> Any:
        return self.simple_call("status")

    def abci_info(self) -> Any:
        return self.simple_call("abci_info")

    def abci_query_with_options(
        self, path: str, data: Optional[bytes] = None, height: int = 0, prove: bool = False
    ) -> Any:
        params = {
            "path": path,
            "data": (data or b"").hex().upper(),
            "height": height,
            "prove": prove,
        }
        return self.simple_call("abci_query", params)

    def broadcast_tx_commit(self, tx: bytes) -> ResultBroadcastTxCommit:
        result = ResultBroadcastTxCommit.from_dict(
            self.simple_call("broadcast_tx_commit", {"tx": bytes(tx)})
        )
        result.complement()
        return result

    def broadcast_tx(self, route: str, tx: bytes) -> Any:
        return self.simple_call(route, {"tx": bytes(tx)})

    def unconfirmed_txs(self, limit: int) -> Any:
        return self.simple_call("unconfirmed_txs", {"limit": limit})

    def num_unconfirmed_txs(self) -> Any:
        return self.simple_call("num_unconfirmed_txs")

    def net_info(self) -> Any:
        return self.simple_call("net_info")

    def dump_consensus_state(self) -> Any:
        return self.simple_call("dump_consensus_state")

    def consensus_state(self) -> Any:
        return self.simple_call("consensus_state")

    def health(self) -> Any:
        return self.simple_call("health")

    def blockchain_info(self, min_height: int, max_height: int) -> Any:
        return self.simple_call(
            "blockchain", {"minHeight": min_height, "maxHeight": max_height}
        )

    def genesis(self) -> Any:
        return self.simple_call("genesis")

    def block(self, height: Optional[int] = None) -> Any:
        return self.simple_call("block", {"height": height})

    def block_results(self, height: Optional[int] = None) -> ResultBlockResults:
        result = ResultBlockResults.from_dict(
            self.simple_call("block_results", {"height": height})
        )
        result.complement()
        return result

    def commit(self, height: Optional[int] = None) -> Any:
        return self.simple_call("commit", {"height": height})

    def tx(self, hash_bytes: bytes, prove: bool = False) -> ResultTx:
        result = ResultTx.from_dict(
            self.simple_call("tx", {"hash": bytes(hash_bytes), "prove": prove})
        )
        result.complement()
        return result

    def tx_search(self, query: str, prove: bool, page: int, per_page: int) -> ResultTxSearch:
        params = {"query": query, "prove": prove, "page": page, "per_page": per_page}
        result = ResultTxSearch.from_dict(self.simple_call("tx_search", params))
        result.complement()
        return result

    def validators(self, height: Optional[int] = None) -> Any:
        return self.simple_call("validators", {"height": height})

    # Background routines

    def _redo_subscriptions(self, client: WebSocketRPCClient) -> None:
        deadline = time.monotonic() + self.timeout
        while not client.is_active():
            if self._quit.is_set() or time.monotonic() > deadline:
                logger.error("websocket client not active, subscriptions not redone")
                return
            time.sleep(0.01)
        with self._lock:
            subscriptions = list(self._subscription_ids.items())
        for query, request_id in subscriptions:
            try:
                client.subscribe(request_id, query, self.timeout)
            except Exception as exc:
                logger.error("failed to resubscribe: %s", exc)

    def _reconnect_routine(self) -> None:
        last_check = time.monotonic()
        while not self._quit.is_set():
            try:
                stale: Optional[WebSocketRPCClient] = self._reconnect.get(
                    timeout=self._alive_check_period
                )
            except queue.Empty:
                stale = None
            if self._quit.is_set():
                return
            if stale is not None and stale.is_running():
                logger.error("stopping websocket client %s after a deadline was exceeded", stale)
                stale.stop()
            now = time.monotonic()
            if stale is not None and now - last_check < self._alive_check_period:
                continue
            last_check = now
            with self._lock:
                current = self._ws
            if current is None or current.is_running():
                continue
            logger.info("websocket client %s stopped, starting a new one", current)
            replacement = self._new_client()
            try:
                replacement.start()
            except Exception as exc:
                logger.error("websocket client start failed: %s", exc)
                continue
            with self._lock:
                self._ws = replacement
            if self._quit.is_set():
                replacement.stop()

    def _event_listener(self) -> None:
        while not self._quit.is_set():
            try:
                response = self._responses.get(timeout=_POLL)
            except queue.Empty:
                continue
            if not isinstance(response.id, str):
                logger.error("unexpected request id type: %r", response.id)
                continue
            with self._lock:
                if response.id in self._subscription_set:
                    # acknowledgement of a subscription
                    continue
                outbox = self._response_queues.get(response.id.split("#")[0])
            if outbox is None:
                continue
            try:
                outbox.put_nowait(response)
            except queue.Full:
                logger.error("out channel is full, dropping result %r", response.result)