"""
Blocks component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from inkspire.domain.document import Node, Position, TextContainer


@dataclass(frozen=True)
class FormatResult:
    """
    Outcome of a block operation.

    ``moves`` maps containers whose children were moved into a replacement
    container, so selections pointing at the old container can follow.
    """

    changed: bool
    moves: dict[Node, TextContainer] = field(default_factory=dict)
    caret: Position | None = None


UNCHANGED = FormatResult(changed=False)
