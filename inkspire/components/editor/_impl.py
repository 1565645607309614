"""
EditorSession - one editable field: document, selection, commands and events.

Key behaviors:
- load() replaces the document from the host value (default document when absent)
- Commands restore the saved selection, locate blocks, apply one formatter
  operation, then notify the host and save the selection again
- Formatting commands inside a code block are suppressed
- Typed text and pastes run the autolinker afterwards
- Every committed mutation emits a ChangeEvent with the serialized document

Invariants:
- I1: No EditorError escapes a public method; failures become logged no-ops
- I2: The document object is never replaced, only its blocks
- I3: After close() the link guard no longer reacts to events
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from inkspire.components.autolink import autolink
from inkspire.components.autolink import build_config as build_autolink_config
from inkspire.components.blocks import (
    FormatResult,
    insert_code_block,
    is_code_container,
    set_alignment,
    set_block_kind,
    wrap_as_list,
)
from inkspire.components.inline import (
    ToolbarState,
    WrapKind,
    insert_text,
    read_active_formatting,
    toggle_inline,
    wrap_selection_as,
)
from inkspire.components.linkguard import ConfirmFn, ExternalLinkGuard, OpenerFn
from inkspire.components.locator import anchor_container, locate
from inkspire.components.sanitizer import (
    MarkupSanitizer,
    SanitizeNote,
    plain_text_to_markup,
)
from inkspire.components.sanitizer import build_config as build_sanitizer_config
from inkspire.components.selection import SelectionTracker, TypingStyle
from inkspire.domain.document import (
    Alignment,
    BlockKind,
    Document,
    EditorError,
    Mark,
    Position,
    Selection,
    parse_block_tag,
)
from inkspire.domain.events import EventTarget, PointerEvent
from inkspire.domain.legacy import migrate_legacy_markers
from inkspire.domain.markup import parse_blocks, parse_fragment, serialize
from inkspire.rules.models import EditorRules

from .models import (
    ChangeEvent,
    Command,
    CommandError,
    CommandKind,
    EditorValue,
    PastePayload,
    TextRange,
)
from .paste import insert_fragment
from .ports import ChangeListener

logger = logging.getLogger(__name__)

MARK_COMMANDS = {
    CommandKind.BOLD: Mark.BOLD,
    CommandKind.ITALIC: Mark.ITALIC,
    CommandKind.UNDERLINE: Mark.UNDERLINE,
}
LIST_KINDS = {"ul": BlockKind.UNORDERED_LIST, "ol": BlockKind.ORDERED_LIST}


class EditorSession:
    """
    Editing session for one field.

    Implements the editing surface the selection tracker, inline formatter
    and link guard operate on.
    """

    def __init__(
        self,
        name: str = "content",
        rules: EditorRules | None = None,
        on_change: ChangeListener | None = None,
        *,
        confirm: ConfirmFn | None = None,
        opener: OpenerFn | None = None,
    ) -> None:
        self.name = name
        self.rules = rules or EditorRules()
        self.document = Document()
        self.selection: Selection | None = None
        self.typing_style: TypingStyle | None = None
        self.events = EventTarget()
        self.focused = False
        self.last_paste_notes: list[SanitizeNote] = []

        self._on_change = on_change
        self._tracker = SelectionTracker(self)
        self._sanitizer = MarkupSanitizer(build_sanitizer_config(self.rules))
        self._autolink = build_autolink_config(self.rules)
        self._guard = ExternalLinkGuard(
            self,
            confirm,
            opener,
            prompt=self.rules.link_guard.prompt,
            require_modifier=self.rules.link_guard.require_modifier,
        )
        self._detach_guard = self._guard.attach()
        self._closed = False

    @property
    def tracker(self) -> SelectionTracker:
        return self._tracker

    @property
    def guard(self) -> ExternalLinkGuard:
        return self._guard

    @property
    def closed(self) -> bool:
        return self._closed

    # --- Value ---

    def load(self, value: EditorValue | Mapping[str, Any] | None = None) -> None:
        """Replace the document with the host value, or the default document."""
        loaded = EditorValue.from_raw(value)
        markup = loaded.html if loaded is not None and loaded.html else None
        self.document.replace_blocks(parse_blocks(markup or self.rules.document.default_html))
        if self.rules.document.migrate_legacy_markers:
            migrate_legacy_markers(self.document)

        self.selection = None
        self.typing_style = None
        self._tracker.clear()
        logger.info(
            "Loaded %s (%s) with %d blocks",
            self.name,
            "value" if markup else "default",
            len(self.document.blocks),
        )

    @property
    def html(self) -> str:
        return serialize(self.document)

    def value(self) -> EditorValue:
        return EditorValue(html=self.html)

    # --- Selection and focus ---

    def focus(self) -> None:
        self.focused = True

    def select(self, selection: Selection | TextRange | None) -> None:
        """Set the live selection (a user selection change) and save it."""
        if isinstance(selection, TextRange):
            try:
                selection = selection.resolve(self.document)
            except EditorError as e:
                logger.warning("Ignoring selection %s: %s", selection, e)
                return
        self.selection = selection
        self._tracker.save()

    def select_all(self) -> None:
        containers = list(self.document.text_containers())
        if not containers:
            self.select(None)
            return
        last = containers[-1]
        self.select(Selection(Position(containers[0], 0), Position(last, last.text_length)))

    def blur(self) -> None:
        """Focus leaves the document: autolink and notify the host."""
        self.focused = False
        self._run_autolink()
        self._commit("blur")

    def close(self) -> None:
        """Tear the session down. Pending link confirmations become inert."""
        if self._closed:
            return
        self._detach_guard()
        self._tracker.clear()
        self._closed = True

    # --- Commands ---

    def run_command(self, raw: str) -> bool:
        """Apply one toolbar command. Returns True when the document changed."""
        try:
            command = Command.parse(raw)
        except CommandError as e:
            logger.warning("Ignoring command: %s", e)
            return False

        self._tracker.restore()
        try:
            changed = self._apply(command)
        except EditorError:
            logger.warning("Command %s failed; document left as is", command, exc_info=True)
            return False
        if changed:
            self._commit(str(command))
        return changed

    def _apply(self, command: Command) -> bool:
        document = self.document
        selection = self.selection
        if selection is None or not selection.is_attached(document):
            logger.debug("No selection in the document; %s ignored", command)
            return False
        if self._in_code_block(selection):
            logger.debug("Selection is inside a code block; %s suppressed", command)
            return False

        kind = command.kind
        if kind in MARK_COMMANDS:
            return toggle_inline(self, MARK_COMMANDS[kind])
        if kind == CommandKind.CODE:
            return wrap_selection_as(self, WrapKind.CODE)
        if kind == CommandKind.FONT:
            return wrap_selection_as(self, WrapKind.FONT, command.argument)
        if kind == CommandKind.CODEBLOCK:
            result = insert_code_block(
                document, selection, self.rules.document.code_placeholder
            )
        elif kind == CommandKind.BLOCK:
            block_kind, level = parse_block_tag(command.argument or "")
            result = set_block_kind(document, locate(document, selection), block_kind, level)
        elif kind == CommandKind.LIST:
            result = wrap_as_list(
                document, locate(document, selection), LIST_KINDS[command.argument or ""]
            )
        else:
            result = set_alignment(
                anchor_container(document, selection), Alignment(command.argument or "left")
            )
        self._follow(result)
        return result.changed

    def _follow(self, result: FormatResult) -> None:
        """Keep the live and saved selections on moved content."""
        if result.moves and self.selection is not None:
            self.selection = self.selection.remapped(result.moves)
        self._tracker.remap(result.moves)
        if result.caret is not None:
            self.selection = Selection(result.caret, result.caret)

    def _in_code_block(self, selection: Selection) -> bool:
        start, end = selection.ordered(self.document)
        return is_code_container(start.container) or is_code_container(end.container)

    # --- Input ---

    def type_text(self, text: str) -> bool:
        """Typed input at the selection. Word boundaries trigger autolinking."""
        try:
            caret = insert_text(self, text)
        except EditorError:
            logger.warning("Typing failed; document left as is", exc_info=True)
            return False
        if caret is None:
            return False
        if any(ch.isspace() for ch in text):
            self._run_autolink()
        self._commit("input")
        return True

    def paste(self, payload: PastePayload) -> bool:
        """Sanitize clipboard contents and insert them at the selection."""
        self.last_paste_notes = []
        selection = self.selection
        if selection is None or not selection.is_attached(self.document):
            logger.debug("Paste without a selection ignored")
            return False

        if payload.html:
            markup, self.last_paste_notes = self._sanitizer.sanitize(payload.html)
        else:
            markup = plain_text_to_markup((payload.text or "").replace("\xa0", " "))
        if not markup:
            return False

        try:
            blocks, inline_only = parse_fragment(markup)
            start, end = selection.ordered(self.document)
            if is_code_container(start.container):
                text = "\n".join(block.text_content() for block in blocks)
                inserted = insert_text(self, text) is not None
            else:
                caret = start if start == end else self.document.delete_range(start, end)
                caret = insert_fragment(self.document, caret, blocks, inline_only)
                self.selection = Selection(caret, caret)
                self.typing_style = None
                inserted = True
        except EditorError:
            logger.warning("Paste failed; document left as is", exc_info=True)
            return False

        if inserted:
            self._run_autolink()
            self._commit("paste")
        return inserted

    # --- State and events ---

    def read_state(self) -> ToolbarState:
        return read_active_formatting(
            self.document, self.selection, self.typing_style, self.rules.fonts
        )

    def dispatch(self, event: PointerEvent) -> bool:
        """Deliver a pointer event. Returns True when the default action proceeds."""
        self._tracker.save()
        return self.events.dispatch(event)

    def _run_autolink(self) -> None:
        saved = self.selection
        try:
            autolink(self.document, self._autolink)
        except EditorError:
            logger.warning("Autolink pass failed", exc_info=True)
        if saved is not None and saved.is_attached(self.document):
            self.selection = Selection(saved.anchor.clamped(), saved.focus.clamped())

    def _commit(self, reason: str) -> None:
        logger.debug("Committing %s after %s", self.name, reason)
        if self._on_change is not None:
            self._on_change(ChangeEvent(name=self.name, value=self.value().to_dict()))
        self._tracker.save()
