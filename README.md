# bncdex

A Python client for a decentralised exchange chain. It talks to a node in
three ways:

- **REST queries** (`bncdex.http_client.BasicClient`, `bncdex.query.QueryClient`):
  accounts, markets, depth, klines, open and closed orders, single orders,
  trades, 24-hour tickers, tokens, time and node info, and broadcasting of
  transactions that are already signed and hex-encoded.
- **Market and account streams** (`bncdex.streams.StreamClient`): callbacks
  for account, order, trade, kline, market diff, market depth, ticker,
  mini-ticker and block-height events, decoded into dataclasses from
  `bncdex.account_events`, `bncdex.market_events` and `bncdex.ticker_events`.
- **Node JSON-RPC over WebSocket** (`bncdex.rpc_client.RPCClient`, built on
  `bncdex.ws_events.WSEvents` and `bncdex.jsonrpc_ws.WebSocketRPCClient`):
  status, blocks, block results, commits, validators, transactions and
  transaction search, ABCI queries, store reads, broadcasting and event
  subscriptions. A background routine replaces a stopped connection and
  redoes the subscriptions.

## Installation

```
pip install bncdex
```

For development and tests:

```
pip install "bncdex[test]"
pytest
```

## REST queries

```python
from bncdex.http_client import BasicClient
from bncdex.query import QueryClient

basic = BasicClient("testnet-dex.example.com")
query = QueryClient(basic)

print(query.get_time())
print(query.get_node_info())
account = query.get_account("tbnb1exampleaddress")
klines = query.get_klines({"symbol": "AAA-000_BBB", "interval": "1h"})
```

Query parameters are passed as a mapping; `None` values are left out and
booleans are sent as `true`/`false`. Results are the decoded JSON; klines come
back as dictionaries keyed by field name. An unknown account comes back as an
empty dictionary. A response whose status is not a success raises
`bncdex.http_client.APIError`, which carries `status_code` and `body`.

## Streams

```python
import threading
from bncdex.http_client import BasicClient
from bncdex.streams import StreamClient

streams = StreamClient(BasicClient("testnet-dex.example.com"))
quit = threading.Event()

streams.subscribe_block_height_event(
    quit,
    on_receive=lambda event: print(event.block_height),
    on_error=lambda err: print("error:", err),
    on_close=lambda: print("closed"),
)
# ... later
quit.set()
```

Each `subscribe_*` method starts a thread and returns it. Kline intervals are
given as `bncdex.market_events.KlineInterval` members or their string values.
Prices and quantities are integers counting units of 1e-8
(`bncdex.market_events.parse_fixed8`); volumes are floats.

## JSON-RPC

```python
from bncdex.rpc_client import new_rpc_client

client = new_rpc_client("tcp://localhost:26657")
print(client.block(10))
print(client.abci_query("/store/acc/key", b"account:"))
client.stop()
```

`RPCClient` checks its arguments before sending (heights, hash length, query
and path lengths, transaction size, limits); bad input raises
`bncdex.validate.ValidationError`, a `ValueError`. Errors returned by the node
raise `bncdex.jsonrpc_ws.RPCError`; a call with no answer within the timeout
(`set_timeout`, 2 seconds by default) raises `TimeoutError`.

Subscriptions go through `subscribe(query, capacity)`, which returns a queue
that receives decoded events until `unsubscribe` or `unsubscribe_all` is
called.

## What this package does not do

It holds no keys and builds or signs no transactions: there is no order
placement, token issuance or transfer helper. `BasicClient.post_tx` and the
`broadcast_tx_*` methods only send transactions that were signed elsewhere.
Store and ABCI query results are returned as raw bytes or decoded JSON; the
binary account, token and order-book encodings used by the chain are not
decoded. There is no command-line program.