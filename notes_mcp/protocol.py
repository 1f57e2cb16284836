"""JSON-RPC envelope building and method dispatch.

The dispatcher is a pure function of (payload, store): it never touches
HTTP objects. The transport hands it the decoded JSON body plus the public
base URL and turns its return value back into a response, where ``None``
means "no content".
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from .metrics import NOTES_STORED, RPC_REQUESTS, TOOL_INVOCATIONS
from .models import JSONRPC_VERSION, ErrorObject, RequestEnvelope, ToolCallParams
from .storage import NoteStore
from .tools import ToolNotFoundError, ToolRegistry, default_registry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-06-18"
SERVER_NAME = "auxee-mcp"
SERVER_VERSION = "2.0.0"

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

# Protocol methods
INITIALIZE = "initialize"
TOOLS_LIST = "tools/list"
TOOLS_CALL = "tools/call"
NOTIFICATION_INITIALIZED = "notifications/initialized"

KNOWN_METHODS = (INITIALIZE, TOOLS_LIST, TOOLS_CALL, NOTIFICATION_INITIALIZED)

Envelope = dict[str, Any]


# ---------------------------------------------------------------------------
# Response builder
# ---------------------------------------------------------------------------


def success(request_id: Any, result: Any) -> Envelope:
    """Build a success envelope."""
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def failure(request_id: Any, code: int, message: str, data: Any = None) -> Envelope:
    """Build a failure envelope; ``data`` is omitted when None."""
    error = ErrorObject(code=code, message=message, data=data)
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": error.model_dump(exclude_none=True),
    }


def _validation_details(exc: ValidationError) -> list[dict[str, Any]]:
    """Trim pydantic errors to JSON-safe location/message pairs."""
    return [
        {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
        for err in exc.errors()
    ]


def initialize_result() -> dict[str, Any]:
    """The fixed result of ``initialize``."""
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {"tools": {"listChanged": True}},
        "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
    }


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class Dispatcher:
    """Route a single request envelope to the matching protocol method.

    Unrecognised methods get a ``{"ok": true}`` result unless
    ``strict_methods`` is set, in which case they fail with
    METHOD_NOT_FOUND like unknown tools do.
    """

    def __init__(
        self,
        store: NoteStore,
        registry: ToolRegistry = default_registry,
        strict_methods: bool = False,
    ) -> None:
        self.store = store
        self.registry = registry
        self.strict_methods = strict_methods

    def handle(self, payload: Any, *, base_url: str = "") -> Envelope | None:
        """Dispatch one decoded request body.

        Returns the response envelope, or None for the one-way
        ``notifications/initialized`` message.
        """
        try:
            request = RequestEnvelope.model_validate(payload)
        except ValidationError as exc:
            request_id = payload.get("id") if isinstance(payload, dict) else None
            logger.warning("Rejected malformed request id=%r", request_id)
            RPC_REQUESTS.labels(method="invalid", outcome="error").inc()
            return failure(
                request_id,
                INVALID_REQUEST,
                "Invalid Request",
                _validation_details(exc),
            )

        method = request.method
        logger.info("RPC %s id=%r", method, request.id)

        if method == INITIALIZE:
            response = success(request.id, initialize_result())
        elif method == TOOLS_LIST:
            tools = [d.to_wire() for d in self.registry.list()]
            response = success(request.id, {"tools": tools})
        elif method == TOOLS_CALL:
            response = self._call_tool(request, base_url)
        elif method == NOTIFICATION_INITIALIZED:
            RPC_REQUESTS.labels(method=method, outcome="notification").inc()
            return None
        elif self.strict_methods:
            response = failure(request.id, METHOD_NOT_FOUND, "Method not found")
        else:
            logger.info("Unrecognised method %r answered with ok", method)
            response = success(request.id, {"ok": True})

        RPC_REQUESTS.labels(
            method=method if method in KNOWN_METHODS else "other",
            outcome="error" if "error" in response else "result",
        ).inc()
        return response

    def _call_tool(self, request: RequestEnvelope, base_url: str) -> Envelope:
        try:
            params = ToolCallParams.model_validate(request.params or {})
        except ValidationError as exc:
            return failure(
                request.id, INVALID_PARAMS, "Invalid params", _validation_details(exc)
            )

        try:
            tool = self.registry.resolve(params.name)
        except ToolNotFoundError:
            logger.warning("tools/call for unknown tool %r", params.name)
            TOOL_INVOCATIONS.labels(tool_name="unknown", status="not_found").inc()
            return failure(request.id, METHOD_NOT_FOUND, "Unknown tool")

        try:
            content = tool.handler(self.store, params.arguments, base_url)
        except ValidationError as exc:
            TOOL_INVOCATIONS.labels(tool_name=tool.name, status="invalid").inc()
            return failure(
                request.id, INVALID_PARAMS, "Invalid params", _validation_details(exc)
            )

        TOOL_INVOCATIONS.labels(tool_name=tool.name, status="success").inc()
        NOTES_STORED.set(self.store.count)
        return success(request.id, {"content": content})
