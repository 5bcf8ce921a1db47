"""HTTP and websocket access to the exchange's public API."""

from __future__ import annotations

import contextlib
import json
import queue
import threading
import time
from typing import Any, Callable, Iterator, Optional

import requests
import websocket

MAX_READ_WAIT_TIME = 30.0
PING_PERIOD = 10.0
KEEP_ALIVE_PERIOD = 30 * 60.0
_POLL_INTERVAL = 1.0
_MAX_REDIRECTS = 10

_CLOSED = object()


class APIError(Exception):
    """An HTTP response whose status code is not a success."""

    def __init__(self, status_code: int, body: bytes) -> None:
        self.status_code = status_code
        self.body = body
        text = body.decode("utf-8", "replace")
        super().__init__(f"bad response, status code {status_code}, response: {text}")


def _field(mapping: dict, name: str) -> Any:
    if name in mapping:
        return mapping[name]
    for key, value in mapping.items():
        if key.lower() == name:
            return value
    return None


def _drain(messages: "queue.Queue[Any]") -> Iterator[Any]:
    while True:
        item = messages.get()
        if item is _CLOSED:
            return
        yield item


class BasicClient:
    """Low-level client for the REST API and its websocket streams."""

    def __init__(
        self,
        base_url: str,
        *,
        api_scheme: str = "https",
        api_prefix: str = "/api/v1",
        ws_scheme: str = "wss",
        ws_prefix: str = "/api/ws",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.api_url = f"{api_scheme}://{base_url}{api_prefix}"
        self.ws_scheme = ws_scheme
        self.ws_prefix = ws_prefix
        self._session = session or requests.Session()
        self._session.max_redirects = _MAX_REDIRECTS

    def get(self, path: str, params: Optional[dict] = None) -> bytes:
        """GET ``path``; raise APIError unless the status is 2xx."""
        response = self._session.get(self.api_url + path, params=params or {})
        if not 200 <= response.status_code < 300:
            raise APIError(response.status_code, response.content)
        return response.content

    def post(self, path: str, body: Any, params: Optional[dict] = None) -> bytes:
        """POST ``body`` as plain text; raise APIError on a status of 300 or more."""
        response = self._session.post(
            self.api_url + path,
            data=body,
            params=params or {},
            headers={"Content-Type": "text/plain"},
        )
        if response.status_code >= 300:
            raise APIError(response.status_code, response.content)
        return response.content

    def get_tx(self, tx_hash: str) -> dict:
        """Return the details of one transaction."""
        if not tx_hash:
            raise ValueError(f"Invalid tx hash {tx_hash} ")
        result = json.loads(self.get("/tx/" + tx_hash, {}))
        if not isinstance(result, dict):
            raise ValueError("unexpected tx result")
        return result

    def post_tx(self, hex_tx: bytes, params: Optional[dict] = None) -> list:
        """Broadcast a hex-encoded signed transaction; return the commit results."""
        if not hex_tx:
            raise ValueError(f"Invalid tx  {hex_tx!r}")
        result = json.loads(self.post("/broadcast", hex_tx, params))
        if not isinstance(result, list):
            raise ValueError("unexpected broadcast result")
        return result

    def ws_get(
        self,
        path: str,
        construct_msg: Callable[[bytes], Any],
        close_event: Optional[threading.Event] = None,
    ) -> Iterator[Any]:
        """Open a stream and yield constructed messages.

        A failure is yielded as an exception object and ends the stream;
        setting ``close_event`` closes it.
        """
        if close_event is None:
            close_event = threading.Event()
        url = f"{self.ws_scheme}://{self.base_url}{self.ws_prefix}/{path}"
        conn = websocket.create_connection(url)
        conn.settimeout(_POLL_INTERVAL)
        messages: "queue.Queue[Any]" = queue.Queue()
        threading.Thread(
            target=self._ws_loop,
            args=(conn, construct_msg, close_event, messages),
            daemon=True,
        ).start()
        return _drain(messages)

    @staticmethod
    def _ws_loop(conn, construct_msg, close_event, messages) -> None:
        def deliver(item: Any) -> bool:
            if close_event.is_set():
                return False
            messages.put(item)
            return True

        start = time.monotonic()
        next_ping = start + PING_PERIOD
        next_keep_alive = start + KEEP_ALIVE_PERIOD
        deadline: Optional[float] = None
        try:
            while True:
                if close_event.is_set():
                    with contextlib.suppress(Exception):
                        conn.send_close()
                    return
                now = time.monotonic()
                if now >= next_keep_alive:
                    next_keep_alive = now + KEEP_ALIVE_PERIOD
                    with contextlib.suppress(Exception):
                        conn.send(json.dumps({"Method": "keepAlive"}))
                if now >= next_ping:
                    next_ping = now + PING_PERIOD
                    with contextlib.suppress(Exception):
                        conn.ping()
                try:
                    opcode, data = conn.recv_data(control_frame=True)
                except websocket.WebSocketTimeoutException:
                    if deadline is not None and time.monotonic() > deadline:
                        deliver(TimeoutError("websocket read deadline exceeded"))
                        return
                    continue
                except Exception as exc:
                    deliver(exc)
                    return
                if opcode == websocket.ABNF.OPCODE_PONG:
                    deadline = time.monotonic() + MAX_READ_WAIT_TIME
                    continue
                if opcode == websocket.ABNF.OPCODE_CLOSE:
                    deliver(ConnectionError("websocket connection closed by peer"))
                    return
                if opcode not in (websocket.ABNF.OPCODE_TEXT, websocket.ABNF.OPCODE_BINARY):
                    continue
                try:
                    response = json.loads(data)
                    if not isinstance(response, dict):
                        raise ValueError("unexpected websocket response")
                    payload = json.dumps(_field(response, "data")).encode()
                    message = construct_msg(payload)
                except Exception as exc:
                    deliver(exc)
                    return
                if message is not None and not deliver(message):
                    return
        finally:
            with contextlib.suppress(Exception):
                conn.close()
            messages.put(_CLOSED)