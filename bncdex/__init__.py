"""Client for a decentralised exchange chain: REST queries, event streams and node JSON-RPC."""

__version__ = "0.1.0"