"""
Selection component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from inkspire.domain.document import Mark, Position, Text


@dataclass(frozen=True)
class TypingStyle:
    """
    Format stored at a caret for the next typed text.

    ``target`` is an empty run inserted by a collapsed wrap (code or font);
    typed text goes into it while the caret stays at ``caret``.
    """

    caret: Position
    marks: frozenset[Mark] = field(default_factory=frozenset)
    font_family: str | None = None
    target: Text | None = None

    def applies_at(self, caret: Position) -> bool:
        return self.caret == caret
