"""
Legacy marker migration.

Documents written by the earlier marker-based editor encode block kinds as
literal text: "h1) Title" or "Title (h2)" for headings, "1) item" for ordered
list entries and "• item" for bullets. This converts such paragraphs into
typed blocks, stripping the markers. Disabled unless the rules enable it.
"""

from __future__ import annotations

import logging
import re

from .document import Block, BlockKind, Document, ListItem, Text

logger = logging.getLogger(__name__)

LEADING_HEADING_MARK = re.compile(r"^h([1-6])\)\s*", re.IGNORECASE)
TRAILING_HEADING_MARK = re.compile(r"\s*\(h([1-6])\)\s*$", re.IGNORECASE)
LEADING_NUMBER_MARK = re.compile(r"^\s*\d+\)\s+")
LEADING_BULLET_MARK = re.compile(r"^\s*•\s+")


def migrate_legacy_markers(document: Document) -> int:
    """Rewrite marker-encoded paragraphs in place. Returns blocks changed."""
    changed = 0
    for block in document.blocks:
        if block.kind != BlockKind.PARAGRAPH:
            continue
        level = _strip_heading_marker(block)
        if level is not None:
            block.set_kind(BlockKind.HEADING, level)
            changed += 1

    changed += _group_list_markers(document, LEADING_NUMBER_MARK, BlockKind.ORDERED_LIST)
    changed += _group_list_markers(document, LEADING_BULLET_MARK, BlockKind.UNORDERED_LIST)
    if changed:
        logger.info("Migrated %d marker-encoded blocks", changed)
    return changed


def _first_text(block: Block) -> Text | None:
    first = block.children[0] if block.children else None
    return first if isinstance(first, Text) else None


def _last_text(block: Block) -> Text | None:
    last = block.children[-1] if block.children else None
    return last if isinstance(last, Text) else None


def _strip_heading_marker(block: Block) -> int | None:
    first = _first_text(block)
    if first is not None:
        match = LEADING_HEADING_MARK.match(first.text)
        if match:
            first.text = first.text[match.end() :]
            block.prune_empty()
            return int(match.group(1))
    last = _last_text(block)
    if last is not None:
        match = TRAILING_HEADING_MARK.search(last.text)
        if match:
            last.text = last.text[: match.start()]
            block.prune_empty()
            return int(match.group(1))
    return None


def _has_marker(block: Block, pattern: re.Pattern[str]) -> bool:
    first = _first_text(block)
    return block.kind == BlockKind.PARAGRAPH and first is not None and bool(
        pattern.match(first.text)
    )


def _group_list_markers(document: Document, pattern: re.Pattern[str], kind: BlockKind) -> int:
    changed = 0
    run: list[Block] = []

    def flush() -> None:
        nonlocal changed
        if not run:
            return
        index = document.index(run[0])
        items = []
        for block in run:
            first = _first_text(block)
            if first is not None:
                first.text = pattern.sub("", first.text, count=1)
            item = ListItem(block.take_children(), block.alignment)
            item.prune_empty()
            items.append(item)
            document.remove(block)
        document.insert(index, Block(kind, items))
        changed += len(run)
        run.clear()

    for block in list(document.blocks):
        if _has_marker(block, pattern):
            run.append(block)
        else:
            flush()
    flush()
    return changed
