"""
Selection component - Port interfaces.

The editing surface is what the session exposes to components in place of a
global window selection: the document, the live selection, the stored
typing style, and focus.
"""

from __future__ import annotations

from typing import Protocol

from inkspire.domain.document import Document, Selection

from .models import TypingStyle


class EditingSurface(Protocol):
    """Live editing state owned by one editor session."""

    document: Document
    selection: Selection | None
    typing_style: TypingStyle | None

    def focus(self) -> None:
        """Move input focus to the document root."""
        ...
