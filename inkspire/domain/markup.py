"""
Markup codec - converts between markup strings and the Document model.

Key behaviors:
- Parsing is lenient (BeautifulSoup with the stdlib html.parser backend)
- Loose inline content at top level is gathered into implicit paragraphs
- b/strong, i/em and u become marks; span/font styles become run style
- text-align on a block becomes its alignment
- Serialization coalesces adjacent runs with identical format
"""

from __future__ import annotations

import html
import logging
from collections.abc import Iterable

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import CData, Declaration, Doctype, ProcessingInstruction

from .document import (
    Alignment,
    Block,
    BlockKind,
    CodeSpan,
    Document,
    LineBreak,
    Link,
    ListItem,
    Mark,
    Node,
    Text,
    TextContainer,
    parse_block_tag,
)

logger = logging.getLogger(__name__)

PARSER = "html.parser"

MARK_TAGS: dict[str, Mark] = {
    "b": Mark.BOLD,
    "strong": Mark.BOLD,
    "i": Mark.ITALIC,
    "em": Mark.ITALIC,
    "u": Mark.UNDERLINE,
}

# Serialization order, outermost first
MARK_ORDER: tuple[tuple[Mark, str], ...] = (
    (Mark.BOLD, "strong"),
    (Mark.ITALIC, "em"),
    (Mark.UNDERLINE, "u"),
)

BLOCK_TAGS = frozenset(
    ["p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "ul", "ol", "pre", "li"]
)
NON_RENDERING_TAGS = frozenset(["script", "style", "template", "head", "title", "meta", "link"])
SKIPPED_STRINGS = (Comment, CData, ProcessingInstruction, Declaration, Doctype)


# --- Style declarations ---


def parse_style(style: str | None) -> dict[str, str]:
    """Parse a CSS declaration list into a lower-cased property dict."""
    declarations: dict[str, str] = {}
    if not style:
        return declarations
    for part in style.split(";"):
        name, sep, value = part.partition(":")
        if not sep:
            continue
        name = name.strip().lower()
        value = value.strip()
        if name and value:
            declarations[name] = value
    return declarations


def format_style(declarations: dict[str, str]) -> str:
    return ";".join(f"{name}:{value}" for name, value in declarations.items())


# --- Parsing ---


class _Format:
    """Inherited inline format while walking markup."""

    def __init__(
        self,
        marks: frozenset[Mark] = frozenset(),
        font_family: str | None = None,
        style: dict[str, str] | None = None,
    ) -> None:
        self.marks = marks
        self.font_family = font_family
        self.style = style or {}

    def with_tag(self, tag: Tag) -> _Format:
        marks = self.marks
        mark = MARK_TAGS.get(tag.name)
        if mark is not None:
            marks = marks | {mark}
        declarations = parse_style(_attr(tag, "style"))
        font_family = declarations.pop("font-family", None) or self.font_family
        if tag.name == "font" and _attr(tag, "face"):
            font_family = _attr(tag, "face")
        declarations.pop("text-align", None)
        style = {**self.style, **declarations}
        return _Format(marks, font_family, style)

    def text(self, value: str) -> Text:
        return Text(value, self.marks, self.font_family, self.style)


def parse_markup(markup: str | None) -> Document:
    """Parse a markup string into a new Document."""
    return Document(parse_blocks(markup or ""))


def parse_blocks(markup: str) -> list[Block]:
    soup = BeautifulSoup(markup, PARSER)
    return _blocks_from(soup.contents)


def parse_fragment(markup: str) -> tuple[list[Block], bool]:
    """
    Parse pasted markup.

    Returns (blocks, inline_only); ``inline_only`` is True when the markup
    held no block elements, so the single implicit paragraph can be spliced
    into the caret's block instead of inserted as a new block.
    """
    soup = BeautifulSoup(markup, PARSER)
    inline_only = soup.find(list(BLOCK_TAGS)) is None
    return _blocks_from(soup.contents), inline_only


def _blocks_from(nodes: Iterable[object]) -> list[Block]:
    blocks: list[Block] = []
    pending: list[Node] = []

    def flush() -> None:
        if any(n.text_content().strip() or isinstance(n, LineBreak) for n in pending):
            blocks.append(Block(BlockKind.PARAGRAPH, pending))
        pending.clear()

    for node in list(nodes):
        if isinstance(node, SKIPPED_STRINGS):
            continue
        if isinstance(node, NavigableString):
            pending.append(Text(str(node)))
            continue
        if not isinstance(node, Tag) or node.name in NON_RENDERING_TAGS:
            continue
        name = node.name
        if name in ("html", "body") or (name == "div" and _has_block_child(node)):
            flush()
            blocks.extend(_blocks_from(node.contents))
            continue
        if name in BLOCK_TAGS and name != "li":
            flush()
            blocks.append(_block_from(node))
            continue
        pending.extend(_inline_from(node, _Format()))
    flush()
    return blocks


def _block_from(tag: Tag) -> Block:
    declarations = parse_style(_attr(tag, "style"))
    alignment = _alignment(declarations.pop("text-align", None))
    name = "p" if tag.name == "div" else tag.name
    kind, level = parse_block_tag(name)

    if kind == BlockKind.CODE_BLOCK:
        return Block(kind, [Text(tag.get_text())] if tag.get_text() else [])

    if kind.is_list:
        items: list[ListItem] = []
        for child in tag.children:
            if isinstance(child, Tag) and child.name == "li":
                item_style = parse_style(_attr(child, "style"))
                item_alignment = _alignment(item_style.pop("text-align", None))
                items.append(
                    ListItem(_inline_children(child, _Format()), item_alignment, item_style)
                )
            elif isinstance(child, Tag) or str(child).strip():
                # stray content inside a list becomes its own item
                content = (
                    _inline_from(child, _Format())
                    if isinstance(child, Tag)
                    else [Text(str(child))]
                )
                items.append(ListItem(content))
        return Block(kind, items, alignment=alignment, style=declarations)

    return Block(
        kind,
        _inline_children(tag, _Format()),
        level=level,
        alignment=alignment,
        style=declarations,
    )


def _inline_children(tag: Tag, fmt: _Format) -> list[Node]:
    nodes: list[Node] = []
    for child in list(tag.children):
        if isinstance(child, SKIPPED_STRINGS):
            continue
        if isinstance(child, NavigableString):
            nodes.append(fmt.text(str(child)))
            continue
        if not isinstance(child, Tag):
            continue
        if child.name in BLOCK_TAGS and nodes:
            # nested block content inside an inline context is kept on its own line
            nodes.append(LineBreak())
        nodes.extend(_inline_from(child, fmt))
    return nodes


def _inline_from(tag: Tag, fmt: _Format) -> list[Node]:
    name = tag.name
    if name in NON_RENDERING_TAGS:
        return []
    if name == "br":
        return [LineBreak()]
    if name == "a":
        children = _inline_children(tag, fmt.with_tag(tag))
        return [
            Link(
                _attr(tag, "href") or "",
                _flatten_links(children),
                target=_attr(tag, "target"),
                rel=_attr(tag, "rel"),
            )
        ]
    if name == "code":
        return [CodeSpan([Text(tag.get_text())])]
    return _inline_children(tag, fmt.with_tag(tag))


def _flatten_links(nodes: list[Node]) -> list[Node]:
    flat: list[Node] = []
    for node in nodes:
        if isinstance(node, Link):
            flat.extend(_flatten_links(node.take_children()))
        else:
            flat.append(node)
    return flat


def _has_block_child(tag: Tag) -> bool:
    return any(isinstance(c, Tag) and c.name in BLOCK_TAGS for c in tag.children)


def _attr(tag: Tag, name: str) -> str | None:
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _alignment(value: str | None) -> Alignment | None:
    if value is None:
        return None
    try:
        alignment = Alignment(value.strip().lower())
    except ValueError:
        logger.debug("Ignoring unsupported alignment %r", value)
        return None
    return None if alignment == Alignment.LEFT else alignment


# --- Serialization ---


def serialize(document: Document) -> str:
    """Serialize a Document to markup."""
    return "".join(serialize_block(block) for block in document.blocks)


def serialize_block(block: Block) -> str:
    tag = block.tag
    attrs = _container_attrs(block)
    if block.is_list:
        inner = "".join(
            f"<li{_container_attrs(item)}>{serialize_inline(item.children)}</li>"
            for item in block.items
        )
        return f"<{tag}{attrs}>{inner}</{tag}>"
    if block.is_code:
        code = html.escape(block.text_content(), quote=False)
        return f"<pre{attrs}><code>{code}</code></pre>"
    return f"<{tag}{attrs}>{serialize_inline(block.children)}</{tag}>"


def serialize_inline(nodes: Iterable[Node]) -> str:
    parts: list[str] = []
    run: list[Text] = []

    def flush() -> None:
        text = "".join(t.text for t in run)
        if text:
            parts.append(_serialize_run(run[0], text))
        run.clear()

    for node in nodes:
        if isinstance(node, Text):
            if run and not run[-1].same_format(node):
                flush()
            run.append(node)
            continue
        flush()
        if isinstance(node, LineBreak):
            parts.append("<br>")
        elif isinstance(node, Link):
            attrs = {"href": node.href, "target": node.target, "rel": node.rel}
            rendered = "".join(
                f' {name}="{html.escape(value, quote=True)}"'
                for name, value in attrs.items()
                if value is not None
            )
            parts.append(f"<a{rendered}>{serialize_inline(node.children)}</a>")
        elif isinstance(node, CodeSpan):
            parts.append(f"<code>{html.escape(node.text_content(), quote=False)}</code>")
    flush()
    return "".join(parts)


def _serialize_run(fmt: Text, text: str) -> str:
    out = html.escape(text, quote=False)
    declarations = dict(fmt.style)
    if fmt.font_family:
        declarations = {"font-family": fmt.font_family, **declarations}
    if declarations:
        style = html.escape(format_style(declarations), quote=True)
        out = f'<span style="{style}">{out}</span>'
    for mark, tag in reversed(MARK_ORDER):
        if mark in fmt.marks:
            out = f"<{tag}>{out}</{tag}>"
    return out


def _container_attrs(container: TextContainer) -> str:
    declarations: dict[str, str] = {}
    if container.alignment is not None and container.alignment != Alignment.LEFT:
        declarations["text-align"] = container.alignment.value
    declarations.update(container.style)
    if not declarations:
        return ""
    return f' style="{html.escape(format_style(declarations), quote=True)}"'
