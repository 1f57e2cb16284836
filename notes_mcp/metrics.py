"""Prometheus metrics for the notes MCP server.

All metric objects are defined here so they can be imported from any module.
"""

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# JSON-RPC metrics
# ---------------------------------------------------------------------------

RPC_REQUESTS = Counter(
    "notes_mcp_rpc_requests_total",
    "Total JSON-RPC requests handled by the dispatcher",
    ["method", "outcome"],  # outcome: result, error, notification
)

TOOL_INVOCATIONS = Counter(
    "notes_mcp_tool_invocations_total",
    "Total tool invocations via tools/call",
    ["tool_name", "status"],
)

# ---------------------------------------------------------------------------
# Store metrics
# ---------------------------------------------------------------------------

NOTES_STORED = Gauge(
    "notes_mcp_notes",
    "Number of notes currently held in memory",
)

# ---------------------------------------------------------------------------
# HTTP request metrics
# ---------------------------------------------------------------------------

HTTP_REQUESTS = Counter(
    "notes_mcp_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_DURATION = Histogram(
    "notes_mcp_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["endpoint"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
)
