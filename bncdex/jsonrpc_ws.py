"""JSON-RPC client that talks to a node over a single websocket connection."""

from __future__ import annotations

import base64
import contextlib
import json
import logging
import queue
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional

import websocket

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0
DEFAULT_DIAL_PERIOD = 1.0
_WRITE_POLL = 0.05

PROTO_HTTP = "http"
PROTO_HTTPS = "https"
PROTO_WS = "ws"
PROTO_WSS = "wss"
PROTO_TCP = "tcp"

NOT_ACTIVE = "websocket client is dialing or stopped, can't send any request"


class RPCError(Exception):
    """An error object returned by the node in a JSON-RPC response."""

    def __init__(self, code: int = 0, message: str = "", data: str = "") -> None:
        self.code = code
        self.message = message
        self.data = data
        text = f"RPC error {code} - {message}"
        if data:
            text += f": {data}"
        super().__init__(text)


@dataclass
class RPCResponse:
    """One JSON-RPC response frame; ``result`` is the decoded JSON value."""

    jsonrpc: str = ""
    id: Any = None
    result: Any = None
    error: Optional[RPCError] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "RPCResponse":
        data = data or {}
        error = data.get("error")
        rpc_error = None
        if error is not None:
            if isinstance(error, dict):
                rpc_error = RPCError(
                    int(error.get("code") or 0),
                    str(error.get("message") or ""),
                    str(error.get("data") or ""),
                )
            else:
                rpc_error = RPCError(message=str(error))
        return cls(
            jsonrpc=str(data.get("jsonrpc") or ""),
            id=data.get("id"),
            result=data.get("result"),
            error=rpc_error,
        )


class RemoteAddress(NamedTuple):
    """A node address split into what the websocket URL and the dialer need."""

    client_protocol: str
    address: str
    network: str
    dial_address: str


def parse_remote(remote_addr: str) -> RemoteAddress:
    """Split ``remote_addr`` such as ``tcp://host:port`` into its parts.

    ``http`` and ``https`` are aliases of ``tcp`` for dialing; a missing
    scheme means ``tcp``. Slashes in the address become dots.
    """
    if "://" in remote_addr:
        network, address = remote_addr.split("://", 1)
    else:
        network, address = PROTO_TCP, remote_addr
    client_protocol = PROTO_HTTP
    if network in (PROTO_HTTP, PROTO_HTTPS):
        client_protocol = network
        network = PROTO_TCP
    elif network in (PROTO_WS, PROTO_WSS):
        client_protocol = network
    return RemoteAddress(client_protocol, address.replace("/", "."), network, address)


def _encode_param(value: Any) -> Any:
    # Integers travel as strings and byte strings as base64, as the node expects.
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, dict):
        return {key: _encode_param(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode_param(item) for item in value]
    return value


class WebSocketRPCClient:
    """Sends JSON-RPC requests over a websocket and queues the responses.

    Responses are put on ``responses``. If the first dial fails the client
    keeps redialling every ``dial_period`` seconds until stopped.
    """

    def __init__(
        self,
        remote: str,
        endpoint: str,
        responses: Optional["queue.Queue[RPCResponse]"] = None,
        *,
        on_dial_success: Optional[Callable[[], None]] = None,
        connect: Optional[Callable[[str], Any]] = None,
        dial_period: float = DEFAULT_DIAL_PERIOD,
        dial_timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        parsed = parse_remote(remote)
        self.protocol = PROTO_WSS if parsed.client_protocol == PROTO_WSS else PROTO_WS
        self.address = parsed.address
        self.endpoint = endpoint
        self.responses: "queue.Queue[RPCResponse]" = (
            responses if responses is not None else queue.Queue()
        )
        self.on_dial_success = on_dial_success
        self.dial_period = dial_period
        self.dial_timeout = dial_timeout
        self._connect = connect or self._default_connect
        self._conn: Any = None
        self._send_queue: "queue.Queue[dict]" = queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self._started = False
        self._quit = threading.Event()
        self._dial_done = threading.Event()
        self._dialing = True

    @property
    def url(self) -> str:
        return f"{self.protocol}://{self.address}{self.endpoint}"

    def __str__(self) -> str:
        return f"{self.address} ({self.endpoint})"

    def __enter__(self) -> "WebSocketRPCClient":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    def _default_connect(self, url: str) -> Any:
        return websocket.create_connection(url, timeout=self.dial_timeout)

    def start(self) -> None:
        """Dial the node and start the read and write loops."""
        with self._lock:
            if self._started:
                raise RuntimeError("websocket client already started")
            self._started = True
        try:
            self._dial()
        except Exception as exc:
            logger.debug("initial dial of %s failed: %s", self.url, exc)
            self._dialing = True
            threading.Thread(target=self._dial_routine, daemon=True).start()
        else:
            self._dialing = False
            self._dial_done.set()
        threading.Thread(target=self._read_routine, daemon=True).start()
        threading.Thread(target=self._write_routine, daemon=True).start()

    def stop(self) -> None:
        """Stop the loops and close the connection; stopping twice is harmless."""
        with self._lock:
            if not self._started or self._quit.is_set():
                return
            self._quit.set()
        self._dial_done.set()
        conn = self._conn
        if conn is not None:
            with contextlib.suppress(Exception):
                conn.close()

    def is_running(self) -> bool:
        return self._started and not self._quit.is_set()

    def is_dialing(self) -> bool:
        return self._dialing

    def is_active(self) -> bool:
        return self.is_running() and not self.is_dialing()

    def send(self, request: dict, timeout: Optional[float] = DEFAULT_TIMEOUT) -> None:
        """Hand ``request`` to the write loop; raise TimeoutError if it is not taken."""
        try:
            self._send_queue.put(request, timeout=timeout)
        except queue.Full as exc:
            raise TimeoutError("timed out sending request") from exc
        logger.debug("sent a request: %s", request)

    def call(
        self,
        method: str,
        request_id: str,
        params: Optional[dict] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ) -> None:
        """Send a JSON-RPC request for ``method``."""
        if not self.is_active():
            raise ConnectionError(NOT_ACTIVE)
        request = {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": method,
            "params": _encode_param(dict(params or {})),
        }
        self.send(request, timeout)

    def gen_request_id(self) -> str:
        return str(uuid.uuid4())

    def subscribe(self, request_id: str, query: str, timeout: Optional[float] = DEFAULT_TIMEOUT) -> None:
        self.call("subscribe", request_id, {"query": query}, timeout)

    def unsubscribe(self, request_id: str, query: str, timeout: Optional[float] = DEFAULT_TIMEOUT) -> None:
        self.call("unsubscribe", request_id, {"query": query}, timeout)

    def unsubscribe_all(self, request_id: str, timeout: Optional[float] = DEFAULT_TIMEOUT) -> None:
        self.call("unsubscribe_all", request_id, {}, timeout)

    def _dial(self) -> None:
        conn = self._connect(self.url)
        with contextlib.suppress(Exception):
            conn.settimeout(None)
        self._conn = conn
        if self.on_dial_success is not None:
            threading.Thread(target=self.on_dial_success, daemon=True).start()

    def _dial_routine(self) -> None:
        try:
            while not self._quit.wait(self.dial_period):
                try:
                    self._dial()
                except Exception as exc:
                    logger.debug("dial of %s failed: %s", self.url, exc)
                    continue
                return
        finally:
            self._dialing = False
            self._dial_done.set()

    def _write_routine(self) -> None:
        self._dial_done.wait()
        conn = self._conn
        if conn is None:
            return
        while True:
            if self._quit.is_set():
                with contextlib.suppress(Exception):
                    conn.send_close()
                return
            try:
                request = self._send_queue.get(timeout=_WRITE_POLL)
            except queue.Empty:
                continue
            try:
                conn.send(json.dumps(request))
            except Exception as exc:
                logger.error("failed to send request: %s", exc)
                self.stop()
                return

    def _read_routine(self) -> None:
        self._dial_done.wait()
        conn = self._conn
        if conn is None:
            return
        while True:
            try:
                data = conn.recv()
            except Exception as exc:
                if not self._quit.is_set():
                    logger.error("failed to read response: %s", exc)
                self.stop()
                return
            try:
                decoded = json.loads(data)
                if not isinstance(decoded, dict):
                    raise ValueError("response is not an object")
                response = RPCResponse.from_dict(decoded)
            except (ValueError, TypeError) as exc:
                logger.error("failed to parse response %r: %s", data, exc)
                continue
            if self._quit.is_set():
                return
            self.responses.put(response)