"""
Block Locator - maps a selection range to the blocks it touches.

Block granularity: a block is located when the range touches any part of
it. List containers are located as one unit by locate(); locate_containers()
expands them into the individual list items between the range ends.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from inkspire.domain.document import (
    Block,
    DetachedNodeError,
    Document,
    Node,
    Selection,
    TextContainer,
)

logger = logging.getLogger(__name__)


def top_level_block(document: Document, node: Node) -> Block | None:
    """Nearest ancestor-or-self whose parent is the document."""
    current: Node | None = node
    while current is not None and current.parent is not document:
        current = current.parent
    return current if isinstance(current, Block) else None


def enclosing_container(node: Node) -> TextContainer | None:
    return node.closest(TextContainer)


def locate(document: Document, selection: Selection | None) -> list[Block]:
    """Top-level blocks from the range start to the range end, inclusive."""
    if selection is None:
        return []
    try:
        start, end = selection.ordered(document)
    except DetachedNodeError:
        logger.debug("Selection is outside the document")
        return []

    first = top_level_block(document, start.container)
    last = top_level_block(document, end.container)
    if first is None or last is None:
        return []

    blocks = document.blocks
    i = _position(blocks, first)
    j = _position(blocks, last)
    return blocks[i : j + 1]


def locate_containers(document: Document, selection: Selection | None) -> list[TextContainer]:
    """Text containers (list items expanded) from the range start to its end."""
    if selection is None:
        return []
    try:
        start, end = selection.ordered(document)
    except DetachedNodeError:
        logger.debug("Selection is outside the document")
        return []

    containers = list(document.text_containers())
    i = _position(containers, start.container)
    j = _position(containers, end.container)
    return containers[i : j + 1]


def anchor_container(document: Document, selection: Selection | None) -> TextContainer | None:
    """The container holding the selection anchor, if it is in the document."""
    if selection is None:
        return None
    container = selection.anchor.container
    return container if document.contains(container) else None


def _position(nodes: Sequence[Node], target: Node) -> int:
    for i, node in enumerate(nodes):
        if node is target:
            return i
    raise DetachedNodeError(f"{target!r} not found")
