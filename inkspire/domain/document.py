"""
Document model - the mutable block tree every editor component operates on.

Key behaviors:
- Document children are top-level Blocks; list Blocks hold ListItems
- Inline content is Text runs, LineBreaks, Links and CodeSpans
- Inserting a node detaches it from its previous parent first, so a node
  always has exactly one parent
- Positions are (text container, character offset) pairs; restructuring
  inline content inside a container never moves a position

Invariants:
- I1: A Link never contains another Link
- I2: CodeSpan children are Text runs only
- I3: A code block holds plain Text runs only
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

# --- Errors ---


class EditorError(Exception):
    """Base error for document and editing operations."""


class DetachedNodeError(EditorError):
    """A node or position refers to content that is no longer in the document."""


class InvalidPositionError(EditorError):
    """A position offset lies outside its container."""


# --- Enumerations ---


class Mark(str, Enum):
    """Inline emphasis marks."""

    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"


class BlockKind(str, Enum):
    """Top-level block kinds."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCKQUOTE = "blockquote"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    CODE_BLOCK = "code_block"

    @property
    def is_list(self) -> bool:
        return self in (BlockKind.UNORDERED_LIST, BlockKind.ORDERED_LIST)


class Alignment(str, Enum):
    """Block text alignment."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


N = TypeVar("N", bound="Node")


# --- Nodes ---


class Node:
    """Base tree node. ``parent`` is maintained by Container methods."""

    def __init__(self) -> None:
        self.parent: Container | None = None

    @property
    def text_length(self) -> int:
        return 0

    def text_content(self) -> str:
        return ""

    def detach(self) -> None:
        if self.parent is not None:
            self.parent.remove(self)

    def ancestors(self) -> Iterator[Container]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def closest(self, cls: type[N]) -> N | None:
        """Return self or the nearest ancestor that is an instance of ``cls``."""
        if isinstance(self, cls):
            return self
        for ancestor in self.ancestors():
            if isinstance(ancestor, cls):
                return ancestor
        return None

    def root(self) -> Node:
        node: Node = self
        while node.parent is not None:
            node = node.parent
        return node


class Text(Node):
    """A run of text sharing one format."""

    def __init__(
        self,
        text: str = "",
        marks: Iterable[Mark] = (),
        font_family: str | None = None,
        style: dict[str, str] | None = None,
    ) -> None:
        super().__init__()
        self.text = text
        self.marks: set[Mark] = set(marks)
        self.font_family = font_family
        self.style: dict[str, str] = dict(style or {})

    def __repr__(self) -> str:
        marks = ",".join(sorted(m.value for m in self.marks))
        return f"Text({self.text!r}, marks=[{marks}], font={self.font_family!r})"

    @property
    def text_length(self) -> int:
        return len(self.text)

    def text_content(self) -> str:
        return self.text

    def format_key(self) -> tuple[frozenset[Mark], str | None, tuple[tuple[str, str], ...]]:
        return (frozenset(self.marks), self.font_family, tuple(sorted(self.style.items())))

    def same_format(self, other: Text) -> bool:
        return self.format_key() == other.format_key()

    def copy_format(self, text: str = "") -> Text:
        """New detached run with this run's format."""
        return Text(text, self.marks, self.font_family, self.style)


class LineBreak(Node):
    """Hard line break inside a block; counts as one character."""

    def __repr__(self) -> str:
        return "LineBreak()"

    @property
    def text_length(self) -> int:
        return 1

    def text_content(self) -> str:
        return "\n"


class Container(Node):
    """Node with ordered children."""

    def __init__(self, children: Iterable[Node] = ()) -> None:
        super().__init__()
        self.children: list[Node] = []
        self.extend(children)

    @property
    def text_length(self) -> int:
        return sum(child.text_length for child in self.children)

    def text_content(self) -> str:
        return "".join(child.text_content() for child in self.children)

    def index(self, node: Node) -> int:
        for i, child in enumerate(self.children):
            if child is node:
                return i
        raise DetachedNodeError(f"{node!r} is not a child of {self!r}")

    def insert(self, index: int, node: Node) -> None:
        if node is self or any(a is node for a in self.ancestors()):
            raise ValueError("cannot insert a node into its own subtree")
        node.detach()
        node.parent = self
        self.children.insert(index, node)

    def append(self, node: Node) -> None:
        self.insert(len(self.children), node)

    def extend(self, nodes: Iterable[Node]) -> None:
        for node in list(nodes):
            self.append(node)

    def insert_all(self, index: int, nodes: Iterable[Node]) -> None:
        for offset, node in enumerate(list(nodes)):
            self.insert(index + offset, node)

    def remove(self, node: Node) -> None:
        del self.children[self.index(node)]
        node.parent = None

    def replace(self, old: Node, new_nodes: Iterable[Node]) -> None:
        """Substitute ``old`` with ``new_nodes`` at the same position."""
        index = self.index(old)
        self.remove(old)
        self.insert_all(index, new_nodes)

    def take_children(self) -> list[Node]:
        """Detach and return all children in order."""
        taken = list(self.children)
        for child in taken:
            child.parent = None
        self.children = []
        return taken

    def walk(self) -> Iterator[Node]:
        """Depth-first, document-order iteration over descendants."""
        for child in self.children:
            yield child
            if isinstance(child, Container):
                yield from child.walk()

    def shallow_copy(self) -> Container:
        raise NotImplementedError


class Link(Container):
    """Hyperlink. Children are Text runs and LineBreaks."""

    def __init__(
        self,
        href: str,
        children: Iterable[Node] = (),
        target: str | None = "_blank",
        rel: str | None = "noopener noreferrer",
    ) -> None:
        super().__init__(children)
        self.href = href
        self.target = target
        self.rel = rel
        self.hovered = False

    def __repr__(self) -> str:
        return f"Link({self.href!r}, {self.text_content()!r})"

    def insert(self, index: int, node: Node) -> None:
        if isinstance(node, Link) or (
            isinstance(node, Container) and any(isinstance(n, Link) for n in node.walk())
        ):
            raise ValueError("links cannot be nested")
        super().insert(index, node)

    def shallow_copy(self) -> Link:
        return Link(self.href, target=self.target, rel=self.rel)


class CodeSpan(Container):
    """Inline code. Children are Text runs."""

    def __repr__(self) -> str:
        return f"CodeSpan({self.text_content()!r})"

    def insert(self, index: int, node: Node) -> None:
        if not isinstance(node, Text):
            raise ValueError("code spans hold text runs only")
        super().insert(index, node)

    def shallow_copy(self) -> CodeSpan:
        return CodeSpan()


# --- Text containers ---


class TextContainer(Container):
    """A container whose children are inline content (Block or ListItem)."""

    def __init__(
        self,
        children: Iterable[Node] = (),
        alignment: Alignment | None = None,
        style: dict[str, str] | None = None,
    ) -> None:
        super().__init__(children)
        self.alignment = alignment
        self.style: dict[str, str] = dict(style or {})

    def leaves(self) -> Iterator[tuple[Node, int]]:
        """Yield (leaf, start offset) for every Text/LineBreak in order."""
        offset = 0
        for node in self.walk():
            if isinstance(node, (Text, LineBreak)):
                yield node, offset
                offset += node.text_length

    def check_offset(self, offset: int) -> None:
        if offset < 0 or offset > self.text_length:
            raise InvalidPositionError(
                f"offset {offset} outside container of length {self.text_length}"
            )

    def boundary(self, offset: int) -> int:
        """
        Ensure a direct-child boundary at ``offset`` and return its child index.

        Text runs, Links and CodeSpans straddling the offset are split in two.
        """
        self.check_offset(offset)
        position = 0
        for i, child in enumerate(self.children):
            if position == offset:
                return i
            length = child.text_length
            if position + length > offset:
                _split_node(child, offset - position)
                return i + 1
            position += length
        return len(self.children)

    def split_leaves_at(self, offset: int) -> None:
        """Ensure a leaf boundary at ``offset`` without splitting links or code spans."""
        self.check_offset(offset)
        for leaf, start in list(self.leaves()):
            if isinstance(leaf, Text) and start < offset < start + leaf.text_length:
                _split_node(leaf, offset - start)
                return

    def leaves_between(self, start: int, end: int) -> list[Node]:
        """Split at both ends and return the leaves fully inside [start, end)."""
        self.split_leaves_at(start)
        self.split_leaves_at(end)
        return [
            leaf
            for leaf, offset in self.leaves()
            if offset >= start and offset + leaf.text_length <= end and leaf.text_length > 0
        ]

    def leaf_at(self, offset: int, prefer_before: bool = True) -> tuple[Node | None, int]:
        """
        Return (leaf, local offset) touching ``offset``.

        With ``prefer_before`` a caret between two leaves resolves to the leaf
        ending at the caret, mirroring how typed text inherits format.
        """
        self.check_offset(offset)
        candidate: tuple[Node | None, int] = (None, 0)
        for leaf, start in self.leaves():
            end = start + leaf.text_length
            if start < offset < end:
                return leaf, offset - start
            if end == offset and prefer_before:
                candidate = (leaf, offset - start)
            elif start == offset and candidate[0] is None:
                candidate = (leaf, 0)
                if not prefer_before:
                    return candidate
        return candidate

    def extract(self, start: int, end: int) -> list[Node]:
        """Detach and return the direct children covering [start, end)."""
        if end < start:
            start, end = end, start
        first = self.boundary(start)
        last = self.boundary(end)
        taken = self.children[first:last]
        for node in list(taken):
            self.remove(node)
        return taken

    def delete(self, start: int, end: int) -> None:
        self.extract(start, end)

    def prune_empty(self) -> None:
        """Drop zero-length text runs and empty links left behind by edits."""
        for node in list(self.walk()):
            if node.parent is None:
                continue
            if isinstance(node, Text) and node.text == "":
                node.detach()
            elif isinstance(node, Link) and node.text_length == 0:
                node.detach()


class Block(TextContainer):
    """Top-level block. List blocks hold ListItems, all others inline content."""

    def __init__(
        self,
        kind: BlockKind = BlockKind.PARAGRAPH,
        children: Iterable[Node] = (),
        level: int | None = None,
        alignment: Alignment | None = None,
        style: dict[str, str] | None = None,
    ) -> None:
        if kind == BlockKind.HEADING and level not in range(1, 7):
            raise ValueError(f"heading level must be 1-6, got {level!r}")
        # kind must be known before children are attached
        self.kind = kind
        self.level = level if kind == BlockKind.HEADING else None
        super().__init__(children, alignment=alignment, style=style)

    def __repr__(self) -> str:
        return f"Block({self.tag}, {self.text_content()!r})"

    @property
    def is_list(self) -> bool:
        return self.kind.is_list

    @property
    def is_code(self) -> bool:
        return self.kind == BlockKind.CODE_BLOCK

    @property
    def items(self) -> list[ListItem]:
        return [child for child in self.children if isinstance(child, ListItem)]

    @property
    def tag(self) -> str:
        return block_tag(self.kind, self.level)

    def set_kind(self, kind: BlockKind, level: int | None = None) -> None:
        if kind == BlockKind.HEADING and level not in range(1, 7):
            raise ValueError(f"heading level must be 1-6, got {level!r}")
        self.kind = kind
        self.level = level if kind == BlockKind.HEADING else None

    def insert(self, index: int, node: Node) -> None:
        if self.is_list and not isinstance(node, ListItem):
            raise ValueError("list blocks hold list items only")
        if not self.is_list and isinstance(node, (Block, ListItem)):
            raise ValueError("blocks cannot be nested")
        super().insert(index, node)

    def shallow_copy(self) -> Block:
        return Block(self.kind, level=self.level, alignment=self.alignment, style=self.style)


class ListItem(TextContainer):
    """One item of a list block."""

    def __repr__(self) -> str:
        return f"ListItem({self.text_content()!r})"

    def shallow_copy(self) -> ListItem:
        return ListItem(alignment=self.alignment, style=self.style)


class Document(Container):
    """Root of the tree: an ordered sequence of top-level Blocks."""

    def __repr__(self) -> str:
        return f"Document({len(self.children)} blocks)"

    @property
    def blocks(self) -> list[Block]:
        return [child for child in self.children if isinstance(child, Block)]

    def insert(self, index: int, node: Node) -> None:
        if not isinstance(node, Block):
            raise ValueError("documents hold blocks only")
        super().insert(index, node)

    def contains(self, node: Node) -> bool:
        return node is self or any(a is self for a in node.ancestors())

    def text_containers(self) -> Iterator[TextContainer]:
        """Non-list blocks and list items in document order."""
        for block in self.blocks:
            if block.is_list:
                yield from block.items
            else:
                yield block

    def replace_blocks(self, blocks: Iterable[Block]) -> None:
        self.take_children()
        self.extend(blocks)

    def position_key(self, position: Position) -> tuple[int, ...]:
        """Sort key giving document order for positions."""
        if not self.contains(position.container):
            raise DetachedNodeError("position container is not in the document")
        path: list[int] = []
        node: Node = position.container
        while node.parent is not None:
            path.append(node.parent.index(node))
            node = node.parent
        path.reverse()
        return (*path, position.offset)

    def delete_range(self, start: Position, end: Position) -> Position:
        """
        Delete everything between two ordered positions and return the caret.

        When the range spans containers the remainder of the end container is
        merged into the start container.
        """
        if start.container is end.container:
            start.container.delete(start.offset, end.offset)
            start.container.prune_empty()
            return start

        containers = list(self.text_containers())
        first = _index_of(containers, start.container)
        last = _index_of(containers, end.container)

        start.container.delete(start.offset, start.container.text_length)
        end.container.delete(0, end.offset)
        for middle in containers[first + 1 : last]:
            _remove_container(middle)

        tail = end.container.take_children()
        if isinstance(start.container, Block) and start.container.is_code:
            text = "".join(node.text_content() for node in tail)
            tail = [Text(text)] if text else []
        start.container.extend(tail)
        _remove_container(end.container)
        start.container.prune_empty()
        return Position(start.container, start.offset)


# --- Positions ---


@dataclass(frozen=True, eq=False)
class Position:
    """A caret location: text container plus character offset."""

    container: TextContainer
    offset: int

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self.container is other.container and self.offset == other.offset

    def __hash__(self) -> int:
        return hash((id(self.container), self.offset))

    def clamped(self) -> Position:
        length = self.container.text_length
        return Position(self.container, max(0, min(self.offset, length)))


@dataclass(frozen=True)
class Selection:
    """Anchor and focus positions; collapsed when they coincide."""

    anchor: Position
    focus: Position

    @classmethod
    def caret(cls, container: TextContainer, offset: int) -> Selection:
        position = Position(container, offset)
        return cls(position, position)

    @classmethod
    def across(
        cls,
        anchor_container: TextContainer,
        anchor_offset: int,
        focus_container: TextContainer | None = None,
        focus_offset: int | None = None,
    ) -> Selection:
        focus = Position(
            focus_container or anchor_container,
            anchor_offset if focus_offset is None else focus_offset,
        )
        return cls(Position(anchor_container, anchor_offset), focus)

    @property
    def collapsed(self) -> bool:
        return self.anchor == self.focus

    def ordered(self, document: Document) -> tuple[Position, Position]:
        """(start, end) in document order."""
        if document.position_key(self.anchor) <= document.position_key(self.focus):
            return self.anchor, self.focus
        return self.focus, self.anchor

    def is_attached(self, document: Document) -> bool:
        return document.contains(self.anchor.container) and document.contains(
            self.focus.container
        )

    def remapped(self, moves: dict[Node, TextContainer]) -> Selection:
        def remap(position: Position) -> Position:
            target = moves.get(position.container)
            return Position(target, position.offset) if target is not None else position

        return Selection(remap(self.anchor), remap(self.focus))


# --- Helpers ---


def block_tag(kind: BlockKind, level: int | None = None) -> str:
    """Markup tag name for a block kind."""
    if kind == BlockKind.HEADING:
        return f"h{level}"
    return {
        BlockKind.PARAGRAPH: "p",
        BlockKind.BLOCKQUOTE: "blockquote",
        BlockKind.UNORDERED_LIST: "ul",
        BlockKind.ORDERED_LIST: "ol",
        BlockKind.CODE_BLOCK: "pre",
    }[kind]


def parse_block_tag(tag: str) -> tuple[BlockKind, int | None]:
    """Inverse of block_tag. Raises ValueError for unknown tags."""
    tag = tag.lower()
    if len(tag) == 2 and tag[0] == "h" and tag[1] in "123456":
        return BlockKind.HEADING, int(tag[1])
    mapping = {
        "p": BlockKind.PARAGRAPH,
        "blockquote": BlockKind.BLOCKQUOTE,
        "ul": BlockKind.UNORDERED_LIST,
        "ol": BlockKind.ORDERED_LIST,
        "pre": BlockKind.CODE_BLOCK,
    }
    if tag not in mapping:
        raise ValueError(f"Unknown block tag '{tag}'")
    return mapping[tag], None


def _split_node(node: Node, local_offset: int) -> None:
    """Split ``node`` at ``local_offset``; the right half is inserted after it."""
    parent = node.parent
    if parent is None:
        raise DetachedNodeError("cannot split a detached node")
    if local_offset <= 0 or local_offset >= node.text_length:
        return
    if isinstance(node, Text):
        right = node.copy_format(node.text[local_offset:])
        node.text = node.text[:local_offset]
        parent.insert(parent.index(node) + 1, right)
        return
    if isinstance(node, Container):
        position = 0
        for child in list(node.children):
            length = child.text_length
            if position < local_offset < position + length:
                _split_node(child, local_offset - position)
                break
            position += length
        clone = node.shallow_copy()
        position = 0
        moving: list[Node] = []
        for child in node.children:
            if position >= local_offset:
                moving.append(child)
            position += child.text_length
        clone.extend(moving)
        parent.insert(parent.index(node) + 1, clone)
        return
    raise EditorError(f"cannot split {node!r}")


def _index_of(containers: list[TextContainer], target: TextContainer) -> int:
    for i, container in enumerate(containers):
        if container is target:
            return i
    raise DetachedNodeError(f"{target!r} is not in the document")


def _remove_container(container: TextContainer) -> None:
    parent = container.parent
    container.detach()
    if isinstance(parent, Block) and parent.is_list and not parent.children:
        parent.detach()
