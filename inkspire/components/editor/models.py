"""
Editor component input/output models.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from inkspire.components.inline import ToolbarState
from inkspire.components.sanitizer import SanitizeNote
from inkspire.domain.document import (
    Alignment,
    Document,
    EditorError,
    InvalidPositionError,
    Position,
    Selection,
)

# --- Errors ---


class CommandError(EditorError):
    """A command string that does not name a known operation."""


# --- Values and events ---


@dataclass(frozen=True)
class EditorValue:
    """The value the host stores for the field: serialized markup."""

    html: str

    def to_dict(self) -> dict[str, str]:
        return {"html": self.html}

    @classmethod
    def from_raw(cls, raw: EditorValue | Mapping[str, Any] | None) -> EditorValue | None:
        """Accept the host's ``{"html": ...}`` mapping, an EditorValue or None."""
        if raw is None or isinstance(raw, EditorValue):
            return raw
        markup = raw.get("html")
        return cls(html=markup) if isinstance(markup, str) else None


@dataclass(frozen=True)
class ChangeEvent:
    """Change notification sent to the host after every committed mutation."""

    name: str
    value: dict[str, str]
    type: str = "json"


@dataclass(frozen=True)
class PastePayload:
    """Clipboard contents: markup and/or plain text representations."""

    html: str | None = None
    text: str | None = None


# --- Commands ---


class CommandKind(str, Enum):
    """Toolbar command names."""

    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    CODE = "code"
    CODEBLOCK = "codeblock"
    BLOCK = "block"
    LIST = "list"
    FONT = "font"
    ALIGN = "align"


BLOCK_ARGUMENTS = frozenset(["p", "blockquote", "h1", "h2", "h3", "h4", "h5", "h6"])
LIST_ARGUMENTS = frozenset(["ul", "ol"])
ALIGN_ARGUMENTS = frozenset(alignment.value for alignment in Alignment)

_ALLOWED_ARGUMENTS: dict[CommandKind, frozenset[str]] = {
    CommandKind.BLOCK: BLOCK_ARGUMENTS,
    CommandKind.LIST: LIST_ARGUMENTS,
    CommandKind.ALIGN: ALIGN_ARGUMENTS,
}


@dataclass(frozen=True)
class Command:
    """A parsed command string such as ``block:h2`` or ``font:Georgia, serif``."""

    kind: CommandKind
    argument: str | None = None

    @classmethod
    def parse(cls, raw: str) -> Command:
        """Parse a command string. Raises CommandError when malformed."""
        name, separator, argument = raw.strip().partition(":")
        try:
            kind = CommandKind(name.strip().lower())
        except ValueError as e:
            raise CommandError(f"Unknown command '{raw}'") from e

        argument = argument.strip()
        if kind == CommandKind.FONT:
            if not argument:
                raise CommandError("font command needs a font family")
            return cls(kind, argument)
        if kind in _ALLOWED_ARGUMENTS:
            value = argument.lower()
            if value not in _ALLOWED_ARGUMENTS[kind]:
                raise CommandError(f"Invalid argument '{argument}' for {kind.value}")
            return cls(kind, value)
        if separator:
            raise CommandError(f"Command '{kind.value}' takes no argument")
        return cls(kind)

    def __str__(self) -> str:
        return self.kind.value if self.argument is None else f"{self.kind.value}:{self.argument}"


# --- Selection addressing ---


@dataclass(frozen=True)
class TextRange:
    """
    Selection addressed by text container index and character offset.

    Container indexes count non-list blocks and list items in document order.
    A missing focus collapses the range onto the anchor.
    """

    anchor_index: int
    anchor_offset: int
    focus_index: int | None = None
    focus_offset: int | None = None

    def resolve(self, document: Document) -> Selection:
        containers = list(document.text_containers())

        def position(index: int, offset: int) -> Position:
            if not 0 <= index < len(containers):
                raise InvalidPositionError(f"no text container at index {index}")
            container = containers[index]
            container.check_offset(offset)
            return Position(container, offset)

        anchor = position(self.anchor_index, self.anchor_offset)
        focus = position(
            self.anchor_index if self.focus_index is None else self.focus_index,
            self.anchor_offset if self.focus_offset is None else self.focus_offset,
        )
        return Selection(anchor, focus)


# --- Input Models ---


@dataclass(frozen=True)
class LoadInput:
    """Input for loading a field value."""

    value: EditorValue | Mapping[str, Any] | None = None
    name: str = "content"


@dataclass(frozen=True)
class CommandInput:
    """Input for applying one toolbar command to markup."""

    html: str
    command: str
    selection: TextRange
    name: str = "content"


@dataclass(frozen=True)
class PasteInput:
    """Input for pasting clipboard contents into markup."""

    html: str
    payload: PastePayload
    selection: TextRange
    name: str = "content"


# --- Output Models ---


@dataclass(frozen=True)
class LoadOutput:
    """Output for a loaded value."""

    value: EditorValue
    block_count: int
    success: bool = True


@dataclass(frozen=True)
class CommandOutput:
    """Output for an applied command."""

    value: EditorValue
    changed: bool
    state: ToolbarState
    success: bool = True


@dataclass(frozen=True)
class PasteOutput:
    """Output for a paste."""

    value: EditorValue
    changed: bool
    notes: list[SanitizeNote] = field(default_factory=list)
    success: bool = True
