"""Static tool catalog and the tool handlers.

Each handler takes the note store, the raw ``arguments`` object of a
``tools/call`` request and the public base URL, and returns the list of
content items placed in ``result.content``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .models import CreateNoteArguments, Note, ToolDescriptor
from .storage import NoteStore

logger = logging.getLogger(__name__)

ContentItem = dict[str, Any]
ToolHandler = Callable[[NoteStore, dict[str, Any], str], list[ContentItem]]

EMPTY_NOTES_TEXT = "_(no notes yet)_"


class NotesMCPError(Exception):
    """Base class for errors raised by the notes server."""


class ToolNotFoundError(NotesMCPError):
    """Raised when ``tools/call`` names a tool that is not registered."""

    def __init__(self, name: Any) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


# ---------------------------------------------------------------------------
# Content items
# ---------------------------------------------------------------------------


def text_item(text: str) -> ContentItem:
    return {"type": "text", "text": text}


def ui_item(base_url: str, notes: list[Note]) -> ContentItem:
    """UI reference pointing the caller at the companion app.

    ``state`` is handed to the app untouched.
    """
    return {
        "type": "ui",
        "url": f"{base_url}/app/",
        "state": {"notes": [n.to_wire() for n in notes]},
    }


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def get_notes(
    store: NoteStore, arguments: dict[str, Any], base_url: str
) -> list[ContentItem]:
    """Summarise every note as a markdown bullet list."""
    notes = store.list_all()
    text = "\n".join(f"- **{n.title}** ({n.id})" for n in notes) or EMPTY_NOTES_TEXT
    logger.info("Tool get_notes invoked — found=%d", len(notes))
    return [text_item(text), ui_item(base_url, notes)]


def create_note(
    store: NoteStore, arguments: dict[str, Any], base_url: str
) -> list[ContentItem]:
    """Create a note at the front of the store.

    Raises:
        pydantic.ValidationError: if ``title`` or ``content`` is missing or
            not a string, or ``tags`` is not a list of strings.
    """
    args = CreateNoteArguments.model_validate(arguments)
    note = store.create(title=args.title, content=args.content, tags=args.tags)
    logger.info("Tool create_note invoked — id=%s", note.id)
    return [
        text_item(f"Created note **{note.title}** ({note.id})"),
        ui_item(base_url, store.list_all()),
    ]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Tool:
    """A registered tool: its public descriptor plus the bound handler."""

    descriptor: ToolDescriptor
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.descriptor.name


class ToolRegistry:
    """Fixed, ordered catalog of tools."""

    def __init__(self, tools: list[Tool]) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    def list(self) -> list[ToolDescriptor]:
        """Descriptors in declaration order."""
        return [t.descriptor for t in self._tools.values()]

    def resolve(self, name: Any) -> Tool:
        """Look up a tool by name, raising ToolNotFoundError if absent."""
        if not isinstance(name, str) or name not in self._tools:
            raise ToolNotFoundError(name)
        return self._tools[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


NOTE_TOOLS: list[Tool] = [
    Tool(
        descriptor=ToolDescriptor(
            name="get_notes",
            description="List notes",
            input_schema={"type": "object"},
        ),
        handler=get_notes,
    ),
    Tool(
        descriptor=ToolDescriptor(
            name="create_note",
            description="Create a note",
            input_schema={
                "type": "object",
                "required": ["title", "content"],
                "properties": {
                    "title": {"type": "string"},
                    "content": {"type": "string"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
            },
        ),
        handler=create_note,
    ),
]

default_registry = ToolRegistry(NOTE_TOOLS)
