"""Pydantic models for notes and the JSON-RPC envelopes."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

JSONRPC_VERSION = "2.0"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


class Note(BaseModel):
    """A single immutable note."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = Field(..., min_length=1, description="Note title")
    content: str = Field(..., description="Note content")
    tags: list[str] = Field(default_factory=list, description="List of tags")
    created_at: str = Field(
        default_factory=utc_now_iso,
        alias="createdAt",
        description="ISO-8601 creation timestamp",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialise with the camelCase keys clients expect."""
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Request side
# ---------------------------------------------------------------------------


class RequestEnvelope(BaseModel):
    """Incoming JSON-RPC request, decoded at the boundary."""

    model_config = ConfigDict(extra="allow")

    id: Any = None
    method: str = Field(..., strict=True)
    # Shape depends on the method; checked by the method's own model.
    params: Any = None


class ToolCallParams(BaseModel):
    """Params of a ``tools/call`` request."""

    # Left unchecked: anything that is not a registered name is an unknown tool.
    name: Any = None
    arguments: dict[str, Any] = Field(default_factory=dict)


class CreateNoteArguments(BaseModel):
    """Arguments accepted by the ``create_note`` tool."""

    title: str = Field(..., min_length=1, strict=True)
    content: str = Field(..., strict=True)
    tags: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Response side
# ---------------------------------------------------------------------------


class ErrorObject(BaseModel):
    """The ``error`` member of a failure envelope."""

    code: int
    message: str
    data: Any = None


class ToolDescriptor(BaseModel):
    """Public description of a tool as returned by ``tools/list``."""

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
