"""Plain HTML rendering of the note list for /notes/ui."""

from __future__ import annotations

import html

from .models import Note

PAGE_TITLE = "Auxee Notes"


def escape(value: object) -> str:
    """Escape ``&``, ``<`` and ``>`` so note text cannot inject markup."""
    return html.escape(str(value), quote=False)


def render_note(note: Note) -> str:
    return (
        '<div style="border:1px solid #ddd;padding:10px;margin:10px;'
        'border-radius:8px;background:#fafafa">'
        f"<h3>{escape(note.title)}</h3>"
        f"<p>{escape(note.content)}</p>"
        f"<small>{escape(', '.join(note.tags))}</small>"
        "</div>"
    )


def render_notes_page(notes: list[Note]) -> str:
    """Full HTML page listing ``notes`` with a link to the companion app."""
    items = "\n".join(render_note(n) for n in notes)
    return (
        f"<html><head><title>{PAGE_TITLE}</title></head>"
        '<body style="font-family:sans-serif;background:#f0f2f5;padding:20px;">'
        f"<h2>{PAGE_TITLE}</h2>\n"
        f"{items}\n"
        '<p style="margin-top:20px;">'
        '<a href="/app" style="color:blue;">Open Full App UI</a>'
        "</p></body></html>"
    )
