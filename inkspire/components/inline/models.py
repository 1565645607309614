"""
Inline component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from inkspire.domain.document import Alignment, BlockKind


class WrapKind(str, Enum):
    """Inline containers a selection can be wrapped in."""

    CODE = "code"
    FONT = "font"


@dataclass(frozen=True)
class ToolbarState:
    """Formatting active at the current selection, as a toolbar displays it."""

    bold: bool = False
    italic: bool = False
    underline: bool = False
    block: BlockKind | None = None
    heading: int | None = None
    list_type: BlockKind | None = None
    alignment: Alignment = Alignment.LEFT
    font_family: str | None = None
    in_code: bool = False
