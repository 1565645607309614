"""
Paste insertion - splices parsed clipboard blocks into the document at a caret.

Inline-only fragments are spliced into the caret's container. Block
fragments split the caret's block: the first pasted block merges into the
head, the remaining blocks follow it, and the tail of the split block joins
the last pasted block. Inside a list the same happens item by item: pasted
blocks become list items after the split item, since lists do not nest.
"""

from __future__ import annotations

from inkspire.components.blocks import is_code_container
from inkspire.domain.document import (
    Block,
    Document,
    LineBreak,
    ListItem,
    Node,
    Position,
    Text,
)


def end_of(block: Block) -> Position:
    """Caret position at the end of a block's last text container."""
    if block.is_list and block.items:
        item = block.items[-1]
        return Position(item, item.text_length)
    return Position(block, block.text_length)


def splice_inline(caret: Position, nodes: list[Node]) -> Position:
    container = caret.container
    index = container.boundary(caret.offset)
    container.insert_all(index, nodes)
    return Position(container, caret.offset + sum(node.text_length for node in nodes))


def insert_fragment(
    document: Document,
    caret: Position,
    blocks: list[Block],
    inline_only: bool,
) -> Position:
    """Insert parsed blocks at ``caret`` and return the caret after them."""
    if not blocks:
        return caret
    container = caret.container

    if inline_only and len(blocks) == 1:
        return splice_inline(caret, blocks[0].take_children())

    if isinstance(container, ListItem):
        return insert_into_item(container, caret.offset, blocks)

    assert isinstance(container, Block)
    tail = container.extract(caret.offset, container.text_length)
    first, rest = blocks[0], blocks[1:]
    if first.is_list or first.is_code:
        rest = blocks
    else:
        container.extend(first.take_children())
    document.insert_all(document.index(container) + 1, rest)

    last = rest[-1] if rest else container
    end = end_of(last)
    if tail:
        holder = end.container
        if isinstance(holder, Block) and not holder.is_list and not is_code_container(holder):
            holder.extend(tail)
        else:
            remainder = container.shallow_copy()
            remainder.extend(tail)
            document.insert(document.index(last) + 1, remainder)
    return end


def as_items(block: Block) -> list[ListItem]:
    """List items carrying a pasted block's content."""
    if block.is_list:
        items = block.items
        block.take_children()
        return items
    if block.is_code:
        lines = block.text_content().split("\n")
        children: list[Node] = []
        for i, line in enumerate(lines):
            if i:
                children.append(LineBreak())
            if line:
                children.append(Text(line))
        return [ListItem(children)]
    return [ListItem(block.take_children(), block.alignment, block.style)]


def insert_into_item(item: ListItem, offset: int, blocks: list[Block]) -> Position:
    """Split ``item`` at ``offset`` and paste ``blocks`` into the list there."""
    list_block = item.parent
    assert isinstance(list_block, Block)
    tail = item.extract(offset, item.text_length)

    first, rest = blocks[0], blocks[1:]
    if first.is_list or first.is_code:
        rest = blocks
    else:
        item.extend(first.take_children())

    items = [new for block in rest for new in as_items(block)]
    list_block.insert_all(list_block.index(item) + 1, items)
    last = items[-1] if items else item
    end = Position(last, last.text_length)
    last.extend(tail)
    return end
