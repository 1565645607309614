"""
Inline Formatter - marks, font family and inline code over a selection.

Key behaviors:
- Range toggles remove a mark only when every text run in range carries it
- Collapsed toggles and wraps store a TypingStyle instead of mutating text
- Code spans and code blocks are never restyled
- Model errors are logged and leave the selection untouched

Invariants:
- I1: Character offsets of every position are unchanged by run splitting
- I2: Typed text lands in the typing target when one is pending at the caret
- I3: Text typed on a link's edge lands outside the link
"""

from __future__ import annotations

import logging
from dataclasses import replace

from inkspire.components.blocks import is_code_container
from inkspire.components.selection import EditingSurface, TypingStyle
from inkspire.domain.document import (
    CodeSpan,
    Container,
    Document,
    EditorError,
    LineBreak,
    Link,
    Mark,
    Node,
    Position,
    Selection,
    Text,
    TextContainer,
)

from .models import WrapKind

logger = logging.getLogger(__name__)


def container_ranges(
    document: Document, start: Position, end: Position
) -> list[tuple[TextContainer, int, int]]:
    """(container, local start, local end) for each container the range touches."""
    containers = list(document.text_containers())
    first = next(i for i, c in enumerate(containers) if c is start.container)
    last = next(i for i, c in enumerate(containers) if c is end.container)
    ranges = []
    for container in containers[first : last + 1]:
        a = start.offset if container is start.container else 0
        b = end.offset if container is end.container else container.text_length
        ranges.append((container, a, b))
    return ranges


def styleable_runs(document: Document, start: Position, end: Position) -> list[Text]:
    """Text runs inside the range, split at its ends; code is excluded."""
    runs: list[Text] = []
    for container, a, b in container_ranges(document, start, end):
        if is_code_container(container) or a == b:
            continue
        for leaf in container.leaves_between(a, b):
            if isinstance(leaf, Text) and leaf.closest(CodeSpan) is None:
                runs.append(leaf)
    return runs


def run_before(position: Position) -> Text | None:
    """The text run whose format typed text at ``position`` would inherit."""
    leaf, _ = position.container.leaf_at(position.offset, prefer_before=True)
    return leaf if isinstance(leaf, Text) else None


def _live_range(surface: EditingSurface) -> tuple[Position, Position] | None:
    selection = surface.selection
    if selection is None or not selection.is_attached(surface.document):
        return None
    start, end = selection.ordered(surface.document)
    if is_code_container(start.container) or is_code_container(end.container):
        logger.debug("Inline formatting suppressed inside a code block")
        return None
    return start, end


def toggle_inline(surface: EditingSurface, mark: Mark) -> bool:
    """
    Flip ``mark`` over the selection. Returns True when the document changed.

    A collapsed selection only updates the typing style and returns False.
    """
    try:
        bounds = _live_range(surface)
        if bounds is None:
            return False
        start, end = bounds
        if start == end:
            _toggle_typing_mark(surface, start, mark)
            return False

        runs = styleable_runs(surface.document, start, end)
        if not runs:
            return False
        if all(mark in run.marks for run in runs):
            for run in runs:
                run.marks.discard(mark)
        else:
            for run in runs:
                run.marks.add(mark)
        return True
    except EditorError:
        logger.warning("Toggling %s failed; selection left unchanged", mark.value, exc_info=True)
        return False


def _toggle_typing_mark(surface: EditingSurface, caret: Position, mark: Mark) -> None:
    style = surface.typing_style
    if style is None or not style.applies_at(caret):
        base = run_before(caret)
        style = TypingStyle(
            caret=caret,
            marks=frozenset(base.marks) if base else frozenset(),
            font_family=base.font_family if base else None,
        )
    surface.typing_style = replace(style, marks=style.marks ^ {mark})


def wrap_selection_as(
    surface: EditingSurface,
    kind: WrapKind,
    font_family: str | None = None,
) -> bool:
    """
    Wrap the selection in inline code or a font family.

    Returns True when the document's content changed. A collapsed selection
    only prepares an empty typing target and returns False.
    """
    if kind == WrapKind.FONT and not font_family:
        raise ValueError("font wrapping needs a font family")
    try:
        bounds = _live_range(surface)
        if bounds is None:
            return False
        start, end = bounds
        if start == end:
            _insert_typing_target(surface, start, kind, font_family)
            return False

        if kind == WrapKind.FONT:
            runs = styleable_runs(surface.document, start, end)
            for run in runs:
                run.font_family = font_family
            changed = bool(runs)
        else:
            changed = _wrap_code(surface.document, start, end)
        surface.selection = Selection(end, end)
        return changed
    except EditorError:
        logger.warning("Wrapping selection as %s failed", kind.value, exc_info=True)
        return False


def _insert_typing_target(
    surface: EditingSurface,
    caret: Position,
    kind: WrapKind,
    font_family: str | None,
) -> None:
    container = caret.container
    base = run_before(caret)
    marks = frozenset(base.marks) if base else frozenset()
    index = container.boundary(caret.offset)
    if kind == WrapKind.CODE:
        target = Text()
        container.insert(index, CodeSpan([target]))
        style = TypingStyle(caret=caret, target=target)
    else:
        target = Text(marks=marks, font_family=font_family)
        container.insert(index, target)
        style = TypingStyle(caret=caret, marks=marks, font_family=font_family, target=target)
    surface.typing_style = style


def _wrap_code(document: Document, start: Position, end: Position) -> bool:
    changed = False
    for container, a, b in container_ranges(document, start, end):
        if is_code_container(container) or a == b:
            continue
        taken = container.extract(a, b)
        index = container.boundary(a)
        container.insert(index, CodeSpan(_as_code_runs(taken)))
        changed = True
    return changed


def _as_code_runs(nodes: list[Node]) -> list[Text]:
    runs: list[Text] = []
    for node in nodes:
        if isinstance(node, Text):
            runs.append(Text(node.text))
        elif isinstance(node, LineBreak):
            runs.append(Text("\n"))
        elif isinstance(node, Container):
            runs.extend(_as_code_runs(list(node.children)))
    return runs


def insert_text(surface: EditingSurface, text: str) -> Position | None:
    """
    Type ``text`` at the selection and return the new caret.

    A range selection is deleted first. Text goes into the pending typing
    target, or takes the typing style, or inherits the run before the caret.
    """
    document = surface.document
    selection = surface.selection
    if not text or selection is None or not selection.is_attached(document):
        return None

    start, end = selection.ordered(document)
    caret = start if start == end else document.delete_range(start, end)
    style = surface.typing_style
    if style is not None and not style.applies_at(caret):
        style = None

    if is_code_container(caret.container):
        _insert_run(caret, text, frozenset(), None)
    elif style is not None and style.target is not None and document.contains(style.target):
        style.target.text += text
        style.target.marks = set(style.marks) if style.target.closest(CodeSpan) is None else set()
    elif style is not None:
        _insert_run(caret, text, style.marks, style.font_family)
    else:
        base = run_before(caret)
        if base is not None:
            _insert_run(caret, text, frozenset(base.marks), base.font_family)
        else:
            _insert_run(caret, text, frozenset(), None)

    new_caret = Position(caret.container, caret.offset + len(text))
    surface.typing_style = None
    surface.selection = Selection(new_caret, new_caret)
    return new_caret


def _insert_run(
    caret: Position,
    text: str,
    marks: frozenset[Mark],
    font_family: str | None,
) -> None:
    container = caret.container
    leaf, local = container.leaf_at(caret.offset, prefer_before=True)
    if leaf is not None and _outside_link(leaf, local, Text(text, marks, font_family)):
        return

    if (
        isinstance(leaf, Text)
        and frozenset(leaf.marks) == marks
        and leaf.font_family == font_family
    ):
        leaf.text = leaf.text[:local] + text + leaf.text[local:]
        return

    style = leaf.style if isinstance(leaf, Text) else None
    run = Text(text, marks, font_family, style)
    if leaf is None or leaf.parent is None:
        container.append(run)
        return
    parent = leaf.parent
    if local == 0:
        parent.insert(parent.index(leaf), run)
        return
    if local < leaf.text_length:
        container.split_leaves_at(caret.offset)
    parent.insert(parent.index(leaf) + 1, run)


def _outside_link(leaf: Node, local: int, run: Text) -> bool:
    """Place ``run`` beside the link when the caret sits on one of its edges."""
    link = leaf.parent
    if not isinstance(link, Link) or link.parent is None:
        return False
    holder = link.parent
    if leaf is link.children[-1] and local == leaf.text_length:
        holder.insert(holder.index(link) + 1, run)
        return True
    if leaf is link.children[0] and local == 0:
        holder.insert(holder.index(link), run)
        return True
    return False
