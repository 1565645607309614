"""
Editor component - stateless entry points over an EditorSession.

Each call loads the given markup into a fresh session, addresses the
selection by text container index, applies one operation and returns the
serialized result.
"""

from __future__ import annotations

from inkspire.rules.models import EditorRules

from ._impl import EditorSession
from .models import (
    CommandInput,
    CommandOutput,
    EditorValue,
    LoadInput,
    LoadOutput,
    PasteInput,
    PasteOutput,
    TextRange,
)


def _open_session(
    name: str, html: str, selection: TextRange, rules: EditorRules | None
) -> EditorSession:
    session = EditorSession(name, rules)
    session.load(EditorValue(html=html))
    session.select(selection)
    return session


# --- Component Entry Points ---


def run_load(
    inp: LoadInput,
    *,
    rules: EditorRules | None = None,
) -> LoadOutput:
    """
    Load a host value.

    Args:
        inp: Input containing the host value (or None for the default document).
        rules: Optional editor rules for configuration.

    Returns:
        LoadOutput with the normalized value.
    """
    session = EditorSession(inp.name, rules)
    try:
        session.load(inp.value)
        return LoadOutput(value=session.value(), block_count=len(session.document.blocks))
    finally:
        session.close()


def run_command(
    inp: CommandInput,
    *,
    rules: EditorRules | None = None,
) -> CommandOutput:
    """
    Apply one toolbar command to markup.

    Args:
        inp: Input containing markup, the command string and the selection.
        rules: Optional editor rules for configuration.

    Returns:
        CommandOutput with the new value and the resulting toolbar state.
    """
    session = _open_session(inp.name, inp.html, inp.selection, rules)
    try:
        changed = session.run_command(inp.command)
        return CommandOutput(value=session.value(), changed=changed, state=session.read_state())
    finally:
        session.close()


def run_paste(
    inp: PasteInput,
    *,
    rules: EditorRules | None = None,
) -> PasteOutput:
    """
    Paste clipboard contents into markup.

    Args:
        inp: Input containing markup, the clipboard payload and the selection.
        rules: Optional editor rules for configuration.

    Returns:
        PasteOutput with the new value and sanitizer notes.
    """
    session = _open_session(inp.name, inp.html, inp.selection, rules)
    try:
        changed = session.paste(inp.payload)
        return PasteOutput(
            value=session.value(),
            changed=changed,
            notes=list(session.last_paste_notes),
        )
    finally:
        session.close()
