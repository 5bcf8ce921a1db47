"""Result types returned by the node's JSON-RPC interface."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Optional

CODE_TYPE_OK = 0


def _int(value: Any) -> int:
    return 0 if value is None else int(value)


def _b64(value: Optional[str]) -> bytes:
    return base64.b64decode(value) if value else b""


def _hex(value: Optional[str]) -> bytes:
    return bytes.fromhex(value) if value else b""


def _tags(value: Optional[list]) -> list[dict]:
    return [dict(tag) for tag in value or []]


def _events(value: Optional[list]) -> list[dict]:
    return [
        {"type": event.get("type", ""), "attributes": _tags(event.get("attributes"))}
        for event in value or []
    ]


def _complement_tags(target: Any) -> None:
    """Keep ``events`` and ``tags`` consistent across node versions."""
    if target.tags:
        target.events = [{"type": "", "attributes": list(target.tags)}]
    elif target.events:
        target.tags = list(target.events[0].get("attributes", []))


def _tx_response_fields(data: Optional[dict]) -> dict:
    data = data or {}
    return {
        "code": _int(data.get("code")),
        "data": _b64(data.get("data")),
        "log": data.get("log") or "",
        "info": data.get("info") or "",
        "gas_wanted": _int(data.get("gas_wanted")),
        "gas_used": _int(data.get("gas_used")),
        "events": _events(data.get("events")),
        "tags": _tags(data.get("tags")),
        "codespace": data.get("codespace") or "",
    }


@dataclass
class _TxResponse:
    code: int = 0
    data: bytes = b""
    log: str = ""
    info: str = ""
    gas_wanted: int = 0
    gas_used: int = 0
    events: list = field(default_factory=list)
    tags: list = field(default_factory=list)
    codespace: str = ""


@dataclass
class ResponseCheckTx(_TxResponse):
    """Outcome of the mempool check of a transaction."""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ResponseCheckTx":
        return cls(**_tx_response_fields(data))

    def is_err(self) -> bool:
        return self.code != CODE_TYPE_OK

    def complement(self) -> None:
        _complement_tags(self)


@dataclass
class ResponseDeliverTx(_TxResponse):
    """Outcome of executing a transaction in a block."""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ResponseDeliverTx":
        return cls(**_tx_response_fields(data))

    def complement(self) -> None:
        _complement_tags(self)


@dataclass
class ResponseEndBlock:
    validator_updates: list = field(default_factory=list)
    consensus_param_updates: Optional[dict] = None
    events: list = field(default_factory=list)
    tags: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ResponseEndBlock":
        data = data or {}
        return cls(
            validator_updates=list(data.get("validator_updates") or []),
            consensus_param_updates=data.get("consensus_param_updates"),
            events=_events(data.get("events")),
            tags=_tags(data.get("tags")),
        )

    def complement(self) -> None:
        _complement_tags(self)


@dataclass
class ResponseBeginBlock:
    events: list = field(default_factory=list)
    tags: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ResponseBeginBlock":
        data = data or {}
        return cls(events=_events(data.get("events")), tags=_tags(data.get("tags")))

    def complement(self) -> None:
        _complement_tags(self)


@dataclass
class ABCIResponses:
    deliver_tx: list = field(default_factory=list)
    end_block: Optional[ResponseEndBlock] = None
    begin_block: Optional[ResponseBeginBlock] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ABCIResponses":
        data = data or {}
        end_block = data.get("EndBlock")
        begin_block = data.get("BeginBlock")
        return cls(
            deliver_tx=[
                None if item is None else ResponseDeliverTx.from_dict(item)
                for item in data.get("DeliverTx") or []
            ],
            end_block=None if end_block is None else ResponseEndBlock.from_dict(end_block),
            begin_block=(
                None if begin_block is None else ResponseBeginBlock.from_dict(begin_block)
            ),
        )

    def complement(self) -> None:
        for deliver in self.deliver_tx:
            if deliver is not None:
                deliver.complement()
        if self.end_block is not None:
            self.end_block.complement()
        if self.begin_block is not None:
            self.begin_block.complement()


@dataclass
class ResultBlockResults:
    height: int = 0
    results: Optional[ABCIResponses] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ResultBlockResults":
        data = data or {}
        results = data.get("results")
        return cls(
            height=_int(data.get("height")),
            results=None if results is None else ABCIResponses.from_dict(results),
        )

    def complement(self) -> None:
        if self.results is not None:
            self.results.complement()


@dataclass
class ResultBroadcastTxCommit:
    check_tx: ResponseCheckTx = field(default_factory=ResponseCheckTx)
    deliver_tx: ResponseDeliverTx = field(default_factory=ResponseDeliverTx)
    hash: bytes = b""
    height: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ResultBroadcastTxCommit":
        data = data or {}
        return cls(
            check_tx=ResponseCheckTx.from_dict(data.get("check_tx")),
            deliver_tx=ResponseDeliverTx.from_dict(data.get("deliver_tx")),
            hash=_hex(data.get("hash")),
            height=_int(data.get("height")),
        )

    def complement(self) -> None:
        self.check_tx.complement()
        self.deliver_tx.complement()


@dataclass
class ResultTx:
    hash: bytes = b""
    height: int = 0
    index: int = 0
    tx_result: ResponseDeliverTx = field(default_factory=ResponseDeliverTx)
    tx: bytes = b""
    proof: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ResultTx":
        data = data or {}
        return cls(
            hash=_hex(data.get("hash")),
            height=_int(data.get("height")),
            index=_int(data.get("index")),
            tx_result=ResponseDeliverTx.from_dict(data.get("tx_result")),
            tx=_b64(data.get("tx")),
            proof=dict(data.get("proof") or {}),
        )

    def complement(self) -> None:
        self.tx_result.complement()


@dataclass
class ResultTxSearch:
    txs: list = field(default_factory=list)
    total_count: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ResultTxSearch":
        data = data or {}
        return cls(
            txs=[ResultTx.from_dict(item) for item in data.get("txs") or []],
            total_count=_int(data.get("total_count")),
        )

    def complement(self) -> None:
        for result in self.txs:
            result.tx_result.complement()