"""
ledger_render -- one-way renderer from the ledger model to ledger text.

Streaming:
    BasicRenderer().render(node, sink)

Whole values:
    render_ledger(ledger) -> bytes
    render_document(directive) -> bytes
    render_to_string(node) -> str
"""

from ledger_render.renderer import (
    BasicRenderer,
    TextSink,
    cost_spec_text,
    incomplete_amount_text,
    render_document,
    render_key_value,
    render_ledger,
    render_to_string,
)

__all__ = [
    "BasicRenderer",
    "TextSink",
    "cost_spec_text",
    "incomplete_amount_text",
    "render_document",
    "render_key_value",
    "render_ledger",
    "render_to_string",
]
