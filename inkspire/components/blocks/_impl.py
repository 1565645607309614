"""
Block Formatter - rewrites located blocks while preserving inline content.

Key behaviors:
- set_block_kind changes kinds in place; list containers are first
  decomposed into one paragraph per item at the list's position
- wrap_as_list gathers located blocks into one new list at the first
  block's position; existing list items move across unchanged. A single
  block holding line breaks becomes one item per non-empty line
- set_alignment only touches the container given (the anchor's)
- insert_code_block inserts at the caret, splitting the block when needed

Invariants:
- I1: No text is lost or reordered
- I2: Code blocks are never rewritten by kind/list/alignment operations
- I3: Operations on stale blocks (no longer in the document) are skipped
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from inkspire.domain.document import (
    Alignment,
    Block,
    BlockKind,
    Document,
    LineBreak,
    ListItem,
    Node,
    Position,
    Selection,
    Text,
    TextContainer,
)

from .models import UNCHANGED, FormatResult

logger = logging.getLogger(__name__)


def is_code_container(container: TextContainer | None) -> bool:
    return isinstance(container, Block) and container.is_code


def decompose_list(
    document: Document,
    list_block: Block,
    moves: dict[Node, TextContainer],
) -> list[Block]:
    """Replace a list with one paragraph per item, in item order."""
    paragraphs: list[Block] = []
    for item in list_block.items:
        paragraph = Block(
            BlockKind.PARAGRAPH,
            item.take_children(),
            alignment=item.alignment,
            style=item.style,
        )
        moves[item] = paragraph
        paragraphs.append(paragraph)
    document.replace(list_block, paragraphs)
    return paragraphs


def set_block_kind(
    document: Document,
    blocks: Sequence[Block],
    kind: BlockKind,
    level: int | None = None,
) -> FormatResult:
    """Change every located block to ``kind`` (heading ``level``)."""
    if kind.is_list or kind == BlockKind.CODE_BLOCK:
        raise ValueError(f"set_block_kind cannot target {kind.value}; use the list/code operations")
    target_level = level if kind == BlockKind.HEADING else None

    moves: dict[Node, TextContainer] = {}
    changed = False
    for block in blocks:
        if block.parent is not document:
            logger.debug("Skipping stale block %r", block)
            continue
        if block.is_code:
            continue
        targets = decompose_list(document, block, moves) if block.is_list else [block]
        changed = changed or block.is_list
        for target in targets:
            if target.kind == kind and target.level == target_level:
                continue
            target.set_kind(kind, target_level)
            changed = True

    if not changed:
        return UNCHANGED
    return FormatResult(changed=True, moves=moves)


def wrap_as_list(
    document: Document,
    blocks: Sequence[Block],
    list_kind: BlockKind,
) -> FormatResult:
    """Wrap located blocks into a single new list of ``list_kind``."""
    if not list_kind.is_list:
        raise ValueError(f"{list_kind.value} is not a list kind")

    located = [block for block in blocks if block.parent is document]
    if not located:
        return UNCHANGED
    if any(block.is_code for block in located):
        logger.debug("List wrap suppressed: selection touches a code block")
        return UNCHANGED
    if len(located) == 1 and located[0].kind == list_kind:
        return UNCHANGED

    index = document.index(located[0])
    moves: dict[Node, TextContainer] = {}
    items: list[ListItem] = []
    caret: Position | None = None
    lines = _lines(located[0]) if len(located) == 1 and not located[0].is_list else []
    if len(lines) > 1:
        block = located[0]
        items = [ListItem(line, block.alignment, block.style) for line in lines]
        caret = Position(items[-1], items[-1].text_length)
    else:
        for block in located:
            if block.is_list:
                items.extend(block.items)
                continue
            item = ListItem(block.take_children(), block.alignment, block.style)
            moves[block] = item
            items.append(item)

    new_list = Block(list_kind, items)
    for block in located:
        document.remove(block)
    document.insert(index, new_list)
    return FormatResult(changed=True, moves=moves, caret=caret)


def _lines(block: Block) -> list[list[Node]]:
    """Direct children of ``block`` grouped by line break; empty lines dropped."""
    lines: list[list[Node]] = [[]]
    for child in block.children:
        if isinstance(child, LineBreak):
            lines.append([])
        else:
            lines[-1].append(child)
    return [line for line in lines if sum(node.text_length for node in line)]


def set_alignment(container: TextContainer | None, alignment: Alignment) -> FormatResult:
    """Align the single container holding the selection anchor."""
    if container is None or is_code_container(container):
        return UNCHANGED
    value = None if alignment == Alignment.LEFT else alignment
    if container.alignment == value:
        return UNCHANGED
    container.alignment = value
    return FormatResult(changed=True)


def insert_code_block(
    document: Document,
    selection: Selection | None,
    placeholder: str = "/* code */",
) -> FormatResult:
    """Insert a code block at the caret, or wrap the selected text in one."""
    if selection is None or not selection.is_attached(document):
        return UNCHANGED
    start, end = selection.ordered(document)
    if is_code_container(start.container) or is_code_container(end.container):
        logger.debug("Code block insertion suppressed inside a code block")
        return UNCHANGED

    if selection.collapsed:
        text = placeholder
        caret = start
    else:
        text = range_text(document, start, end)
        caret = document.delete_range(start, end)

    code = Block(BlockKind.CODE_BLOCK, [Text(text)] if text else [])
    container = caret.container
    if isinstance(container, ListItem):
        list_block = container.parent
        assert isinstance(list_block, Block)
        document.insert(document.index(list_block) + 1, code)
    elif isinstance(container, Block):
        index = document.index(container)
        length = container.text_length
        if caret.offset == 0 and length > 0:
            document.insert(index, code)
        elif caret.offset >= length:
            document.insert(index + 1, code)
        else:
            rest = container.shallow_copy()
            rest.extend(container.extract(caret.offset, length))
            document.insert_all(index + 1, [code, rest])

    return FormatResult(changed=True, caret=Position(code, code.text_length))


def range_text(document: Document, start: Position, end: Position) -> str:
    """Plain text between two ordered positions; containers joined by newlines."""
    if start.container is end.container:
        return start.container.text_content()[start.offset : end.offset]
    containers = list(document.text_containers())
    first = next(i for i, c in enumerate(containers) if c is start.container)
    last = next(i for i, c in enumerate(containers) if c is end.container)
    parts = [start.container.text_content()[start.offset :]]
    parts.extend(c.text_content() for c in containers[first + 1 : last])
    parts.append(end.container.text_content()[: end.offset])
    return "\n".join(parts)
