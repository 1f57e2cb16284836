"""Thin HTTP client for the notes MCP server.

All functions return parsed JSON (dicts/lists) or raise on failure.
Uses requests (synchronous) since the server handles one request at a time.
"""

from __future__ import annotations

import itertools
import os
from typing import Any

import requests

BASE_URL = os.getenv("NOTES_MCP_URL", "http://localhost:3003")
_TIMEOUT = 10  # seconds

_ids = itertools.count(1)


class RPCError(Exception):
    """The server answered with a JSON-RPC error envelope."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.data = data


def rpc(method: str, params: dict[str, Any] | None = None) -> Any:
    """POST / — send one JSON-RPC request and return its ``result``.

    Returns None for notifications, which the server answers with 204.
    """
    body: dict[str, Any] = {"jsonrpc": "2.0", "id": next(_ids), "method": method}
    if params is not None:
        body["params"] = params
    resp = requests.post(f"{BASE_URL}/", json=body, timeout=_TIMEOUT)
    resp.raise_for_status()
    if resp.status_code == 204:
        return None
    envelope = resp.json()
    if "error" in envelope:
        err = envelope["error"]
        raise RPCError(err["code"], err["message"], err.get("data"))
    return envelope["result"]


def initialize() -> dict[str, Any]:
    """Run the handshake: ``initialize`` then ``notifications/initialized``."""
    result = rpc("initialize")
    rpc("notifications/initialized")
    return result


def list_tools() -> list[dict[str, Any]]:
    """tools/list — declared tool descriptors."""
    return rpc("tools/list")["tools"]


def call_tool(name: str, arguments: dict[str, Any] | None = None) -> list[dict[str, Any]]:
    """tools/call — invoke a tool and return its content items."""
    return rpc("tools/call", {"name": name, "arguments": arguments or {}})["content"]


def get_notes() -> list[dict[str, Any]]:
    return call_tool("get_notes")


def create_note(
    title: str, content: str, tags: list[str] | None = None
) -> list[dict[str, Any]]:
    return call_tool(
        "create_note", {"title": title, "content": content, "tags": tags or []}
    )


def ping() -> dict[str, Any]:
    """GET /ping — liveness check."""
    resp = requests.get(f"{BASE_URL}/ping", timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def list_notes() -> list[dict[str, Any]]:
    """GET /notes — current notes as JSON."""
    resp = requests.get(f"{BASE_URL}/notes", timeout=_TIMEOUT)
    resp.raise_for_status()
    return resp.json()["notes"]
