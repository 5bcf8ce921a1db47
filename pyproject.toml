[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bncdex"
version = "0.1.0"
description = "Client library for a decentralised exchange chain: REST queries, market streams and node JSON-RPC over WebSocket"
requires-python = ">=3.10"
keywords = ["dex", "exchange", "blockchain", "tendermint", "websocket", "json-rpc"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "requests>=2.25",
    "websocket-client>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.22",
]

[tool.hatch.build.targets.wheel]
packages = ["bncdex"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]
