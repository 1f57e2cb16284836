"""Tests for the JSON-RPC dispatcher and envelope builders."""

from __future__ import annotations

import itertools

import pytest

from notes_mcp.protocol import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    Dispatcher,
    failure,
    success,
)
from notes_mcp.storage import NoteStore, demo_notes

BASE = "http://notes.test"


@pytest.fixture()
def store() -> NoteStore:
    counter = itertools.count(1)
    return NoteStore(id_generator=lambda: f"id{next(counter)}")


@pytest.fixture()
def dispatcher(store: NoteStore) -> Dispatcher:
    return Dispatcher(store)


def _call(dispatcher: Dispatcher, name: str, arguments: dict | None = None, rid=1):
    params: dict = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return dispatcher.handle(
        {"jsonrpc": "2.0", "id": rid, "method": "tools/call", "params": params},
        base_url=BASE,
    )


# ===================================================================
# Envelope builders
# ===================================================================


class TestEnvelopes:
    def test_success(self) -> None:
        assert success(7, {"a": 1}) == {"jsonrpc": "2.0", "id": 7, "result": {"a": 1}}

    def test_failure_without_data(self) -> None:
        assert failure("x", -32601, "Unknown tool") == {
            "jsonrpc": "2.0",
            "id": "x",
            "error": {"code": -32601, "message": "Unknown tool"},
        }

    def test_failure_arbitrary_code_and_data(self) -> None:
        env = failure(None, 1234, "Custom", {"why": "because"})
        assert env["error"] == {"code": 1234, "message": "Custom", "data": {"why": "because"}}


# ===================================================================
# initialize / tools/list
# ===================================================================


class TestInitialize:
    @pytest.mark.parametrize("rid", [1, "abc", None, {"nested": True}])
    def test_fixed_result(self, dispatcher: Dispatcher, rid) -> None:
        response = dispatcher.handle({"id": rid, "method": "initialize"})
        assert response == {
            "jsonrpc": "2.0",
            "id": rid,
            "result": {
                "protocolVersion": "2025-06-18",
                "capabilities": {"tools": {"listChanged": True}},
                "serverInfo": {"name": "auxee-mcp", "version": "2.0.0"},
            },
        }

    def test_idempotent(self, dispatcher: Dispatcher) -> None:
        first = dispatcher.handle({"id": 1, "method": "initialize"})
        second = dispatcher.handle({"id": 1, "method": "initialize", "params": {"x": 1}})
        assert first == second


class TestToolsList:
    def test_two_tools_in_order(self, dispatcher: Dispatcher) -> None:
        tools = dispatcher.handle({"id": 2, "method": "tools/list"})["result"]["tools"]
        assert [t["name"] for t in tools] == ["get_notes", "create_note"]
        assert tools[0] == {
            "name": "get_notes",
            "description": "List notes",
            "inputSchema": {"type": "object"},
        }
        assert tools[1]["inputSchema"]["required"] == ["title", "content"]

    def test_independent_of_store(self, store: NoteStore, dispatcher: Dispatcher) -> None:
        before = dispatcher.handle({"id": 2, "method": "tools/list"})
        store.create("A", "a", [])
        assert dispatcher.handle({"id": 2, "method": "tools/list"}) == before


# ===================================================================
# tools/call
# ===================================================================


class TestToolsCall:
    def test_create_then_get(self, dispatcher: Dispatcher) -> None:
        created = _call(dispatcher, "create_note", {"title": "T1", "content": "C1", "tags": ["x"]})
        assert created["result"]["content"][0]["text"] == "Created note **T1** (id1)"

        listed = _call(dispatcher, "get_notes", rid=2)
        text, ui = listed["result"]["content"]
        assert "T1" in text["text"]
        assert "id1" in text["text"]
        assert ui["url"] == f"{BASE}/app/"
        assert ui["state"]["notes"][0]["id"] == "id1"
        assert ui["state"]["notes"][0]["title"] == "T1"

    def test_sequence_of_creates(self, store: NoteStore, dispatcher: Dispatcher) -> None:
        for i in range(5):
            _call(dispatcher, "create_note", {"title": f"N{i}", "content": "c"}, rid=i)
        assert store.count == 5
        notes = _call(dispatcher, "get_notes")["result"]["content"][1]["state"]["notes"]
        assert [n["title"] for n in notes] == ["N4", "N3", "N2", "N1", "N0"]
        assert len({n["id"] for n in notes}) == 5

    def test_arguments_default_to_empty(self, dispatcher: Dispatcher) -> None:
        response = _call(dispatcher, "get_notes")
        assert response["result"]["content"][0]["text"] == "_(no notes yet)_"

    def test_unknown_tool(self, dispatcher: Dispatcher) -> None:
        response = _call(dispatcher, "nonexistent_tool", rid="req-9")
        assert response == {
            "jsonrpc": "2.0",
            "id": "req-9",
            "error": {"code": -32601, "message": "Unknown tool"},
        }

    def test_missing_name_is_unknown_tool(self, dispatcher: Dispatcher) -> None:
        response = dispatcher.handle({"id": 3, "method": "tools/call", "params": {}})
        assert response["error"] == {"code": METHOD_NOT_FOUND, "message": "Unknown tool"}
        assert response["id"] == 3

    @pytest.mark.parametrize("name", [None, 7, ["get_notes"], {"n": 1}])
    def test_non_string_name_is_unknown_tool(self, dispatcher: Dispatcher, name) -> None:
        response = dispatcher.handle(
            {"id": 3, "method": "tools/call", "params": {"name": name}}
        )
        assert response["error"] == {"code": METHOD_NOT_FOUND, "message": "Unknown tool"}

    def test_missing_params_is_unknown_tool(self, dispatcher: Dispatcher) -> None:
        response = dispatcher.handle({"id": 3, "method": "tools/call"})
        assert response["error"]["code"] == METHOD_NOT_FOUND

    def test_params_not_object(self, dispatcher: Dispatcher) -> None:
        response = dispatcher.handle({"id": 3, "method": "tools/call", "params": "get_notes"})
        assert response["error"]["code"] == INVALID_PARAMS

    def test_arguments_not_object(self, dispatcher: Dispatcher) -> None:
        response = dispatcher.handle(
            {"id": 3, "method": "tools/call", "params": {"name": "get_notes", "arguments": [1]}}
        )
        assert response["error"]["code"] == INVALID_PARAMS

    def test_create_note_missing_content(self, store: NoteStore, dispatcher: Dispatcher) -> None:
        response = _call(dispatcher, "create_note", {"title": "T"})
        assert response["error"]["code"] == INVALID_PARAMS
        assert response["error"]["message"] == "Invalid params"
        assert any(d["loc"] == ["content"] for d in response["error"]["data"])
        assert store.count == 0


# ===================================================================
# Notification and fallback
# ===================================================================


class TestNotificationAndFallback:
    def test_initialized_notification_has_no_body(self, dispatcher: Dispatcher) -> None:
        assert dispatcher.handle({"method": "notifications/initialized"}) is None

    def test_unknown_method_is_permissive(self, dispatcher: Dispatcher) -> None:
        assert dispatcher.handle({"id": 4, "method": "foo/bar"}) == {
            "jsonrpc": "2.0",
            "id": 4,
            "result": {"ok": True},
        }

    def test_method_match_is_exact(self, dispatcher: Dispatcher) -> None:
        response = dispatcher.handle({"id": 5, "method": "tools/list/extra"})
        assert response["result"] == {"ok": True}

    def test_strict_mode_rejects_unknown_method(self, store: NoteStore) -> None:
        strict = Dispatcher(store, strict_methods=True)
        response = strict.handle({"id": 4, "method": "foo/bar"})
        assert response["error"] == {"code": METHOD_NOT_FOUND, "message": "Method not found"}

    def test_strict_mode_keeps_known_methods(self) -> None:
        strict = Dispatcher(NoteStore(seed=demo_notes()), strict_methods=True)
        assert strict.handle({"method": "notifications/initialized"}) is None
        assert "result" in strict.handle({"id": 1, "method": "initialize"})


# ===================================================================
# Malformed envelopes
# ===================================================================


class TestMalformedRequests:
    @pytest.mark.parametrize("payload", ["initialize", [1, 2], None, 42])
    def test_not_an_object(self, dispatcher: Dispatcher, payload) -> None:
        response = dispatcher.handle(payload)
        assert response["error"]["code"] == INVALID_REQUEST
        assert response["id"] is None

    def test_missing_method_echoes_id(self, dispatcher: Dispatcher) -> None:
        response = dispatcher.handle({"id": 11})
        assert response["error"]["code"] == INVALID_REQUEST
        assert response["id"] == 11

    def test_non_string_method(self, dispatcher: Dispatcher) -> None:
        response = dispatcher.handle({"id": 12, "method": 5})
        assert response["error"]["code"] == INVALID_REQUEST
