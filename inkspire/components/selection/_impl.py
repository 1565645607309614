"""
SelectionTracker - keeps the user's selection across focus changes.

Toolbar interaction moves focus away from the document, so the session
saves the selection on every pointer/key interaction and restores it
before running a command.

Key behaviors:
- save() is a no-op without a live selection
- restore() is a no-op without a saved selection and focuses the document
- Offsets are clamped to the current container length on restore
- A saved selection whose container left the document is not restored
"""

from __future__ import annotations

import logging

from inkspire.domain.document import Node, Selection, TextContainer

from .ports import EditingSurface

logger = logging.getLogger(__name__)


class SelectionTracker:
    """Single-slot saved selection for one editing surface."""

    def __init__(self, surface: EditingSurface) -> None:
        self._surface = surface
        self._saved: Selection | None = None

    @property
    def saved(self) -> Selection | None:
        return self._saved

    @property
    def has_saved(self) -> bool:
        return self._saved is not None

    def save(self) -> None:
        """Record the live selection."""
        selection = self._surface.selection
        if selection is None:
            return
        self._saved = selection

    def restore(self) -> None:
        """Reinstate the saved selection and focus the document."""
        saved = self._saved
        if saved is None:
            return
        document = self._surface.document
        if not saved.is_attached(document):
            logger.debug("Saved selection points outside the document; not restoring")
            return
        self._surface.focus()
        self._surface.selection = Selection(saved.anchor.clamped(), saved.focus.clamped())

    def clear(self) -> None:
        self._saved = None

    def remap(self, moves: dict[Node, TextContainer]) -> None:
        """Follow containers whose children were moved into replacements."""
        if self._saved is not None and moves:
            self._saved = self._saved.remapped(moves)
