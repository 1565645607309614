"""
State reader - derives the toolbar state from the document and selection.

Key behaviors:
- Marks are reported only for selections inside a single container
- A mark is active through an explicit mark or an effective style declaration
- Heading containers never count as bold through font-weight alone
- Block, heading, list and alignment come from the anchor's container
- Reading never mutates the document
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from inkspire.components.locator import top_level_block
from inkspire.components.selection import TypingStyle
from inkspire.domain.document import (
    Alignment,
    Block,
    BlockKind,
    DetachedNodeError,
    Document,
    Mark,
    Node,
    Position,
    Selection,
    Text,
    TextContainer,
)
from inkspire.rules.models import FontRule

from .models import ToolbarState

logger = logging.getLogger(__name__)

BOLD_WEIGHTS = {"bold", "bolder"}
ITALIC_STYLES = {"italic", "oblique"}


def read_active_formatting(
    document: Document,
    selection: Selection | None,
    typing_style: TypingStyle | None = None,
    fonts: Sequence[FontRule] = (),
) -> ToolbarState:
    """Snapshot of the formatting active at ``selection``."""
    if selection is None or not selection.is_attached(document):
        return ToolbarState()
    try:
        start, end = selection.ordered(document)
    except DetachedNodeError:
        return ToolbarState()

    anchor = selection.anchor.container
    block = top_level_block(document, anchor)
    kind = block.kind if block is not None else None

    marks: set[Mark] = set()
    family: str | None = None
    # Marks are only meaningful inside one container
    if start.container is end.container:
        if start == end and typing_style is not None and typing_style.applies_at(start):
            marks = set(typing_style.marks)
            family = typing_style.font_family
        else:
            runs = _runs_touching(start, end)
            if runs:
                marks = {mark for mark in Mark if all(has_mark(run, mark) for run in runs)}
                family = effective_font_family(runs[0])

    return ToolbarState(
        bold=Mark.BOLD in marks,
        italic=Mark.ITALIC in marks,
        underline=Mark.UNDERLINE in marks,
        block=kind,
        heading=block.level if block is not None else None,
        list_type=kind if kind is not None and kind.is_list else None,
        alignment=anchor.alignment or Alignment.LEFT,
        font_family=match_font(family, fonts),
        in_code=kind == BlockKind.CODE_BLOCK,
    )


def _runs_touching(start: Position, end: Position) -> list[Text]:
    container = start.container
    if start.offset == end.offset:
        leaf, _ = container.leaf_at(start.offset, prefer_before=True)
        return [leaf] if isinstance(leaf, Text) else []
    runs = []
    for leaf, offset in container.leaves():
        overlaps = offset < end.offset and offset + leaf.text_length > start.offset
        if overlaps and isinstance(leaf, Text):
            runs.append(leaf)
    return runs


def has_mark(run: Text, mark: Mark) -> bool:
    """Explicit mark, else the effective style fallback."""
    if mark in run.marks:
        return True
    if mark == Mark.BOLD:
        container = run.closest(TextContainer)
        if isinstance(container, Block) and container.kind == BlockKind.HEADING:
            return False
        return is_bold_weight(effective_property(run, "font-weight"))
    if mark == Mark.ITALIC:
        return (effective_property(run, "font-style") or "").lower() in ITALIC_STYLES
    decoration = effective_property(run, "text-decoration-line") or effective_property(
        run, "text-decoration"
    )
    return "underline" in (decoration or "").lower()


def is_bold_weight(value: str | None) -> bool:
    if not value:
        return False
    value = value.strip().lower()
    if value in BOLD_WEIGHTS:
        return True
    match = re.match(r"\d+", value)
    return match is not None and int(match.group()) >= 600


def effective_property(node: Node, name: str) -> str | None:
    """Nearest declaration of ``name`` on the run or its styled ancestors."""
    candidates: list[Node] = [node, *node.ancestors()]
    for candidate in candidates:
        style = getattr(candidate, "style", None)
        if style and name in style:
            return style[name]
    return None


def effective_font_family(run: Text) -> str | None:
    return run.font_family or effective_property(run, "font-family")


def match_font(family: str | None, fonts: Sequence[FontRule]) -> str | None:
    """Known font label contained in ``family``, else the raw family string."""
    if not family:
        return None
    lowered = family.lower()
    for font in fonts:
        if font.label.lower() in lowered:
            return font.label
    return family.strip() or None
