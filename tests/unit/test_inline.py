"""
Inline formatter unit tests.

Tests for mark toggles, inline wraps and typed input.
"""

from __future__ import annotations

import pytest

from inkspire.components.inline import (
    WrapKind,
    insert_text,
    styleable_runs,
    toggle_inline,
    wrap_selection_as,
)
from inkspire.components.selection import TypingStyle
from inkspire.domain.document import Document, Link, Mark, Position, Selection
from inkspire.domain.markup import parse_markup, serialize
from tests.conftest import caret_after, find_text

# --- Mock Surface ---


class MockSurface:
    """In-memory editing surface for testing."""

    def __init__(self, markup: str) -> None:
        self.document: Document = parse_markup(markup)
        self.selection: Selection | None = None
        self.typing_style: TypingStyle | None = None

    def focus(self) -> None:
        pass

    @property
    def html(self) -> str:
        return serialize(self.document)


def surface_with(markup: str, needle: str | None = None) -> MockSurface:
    surface = MockSurface(markup)
    if needle is not None:
        surface.selection = find_text(surface.document, needle)
    return surface


# --- Toggles ---


class TestToggleInline:
    """Test mark toggling over ranges and carets."""

    def test_range_gains_mark(self) -> None:
        surface = surface_with("<p>Hello world</p>", "world")

        assert toggle_inline(surface, Mark.BOLD)
        assert surface.html == "<p>Hello <strong>world</strong></p>"

    def test_fully_marked_range_loses_mark(self) -> None:
        surface = surface_with("<p>Hello <strong>world</strong></p>", "world")

        toggle_inline(surface, Mark.BOLD)

        assert surface.html == "<p>Hello world</p>"

    def test_partially_marked_range_is_fully_marked(self) -> None:
        surface = surface_with("<p>ab<em>cd</em></p>", "bc")

        toggle_inline(surface, Mark.ITALIC)

        assert surface.html == "<p>a<em>bcd</em></p>"

    def test_double_toggle_restores_markup(self) -> None:
        original = "<p>one <u>two</u> three</p>"
        surface = surface_with(original, "two three")

        toggle_inline(surface, Mark.BOLD)
        surface.selection = find_text(surface.document, "two three")
        toggle_inline(surface, Mark.BOLD)

        assert surface.html == original

    def test_range_across_blocks(self) -> None:
        surface = surface_with("<p>ab</p><p>cd</p>")
        first, second = surface.document.blocks
        surface.selection = Selection.across(first, 1, second, 1)

        toggle_inline(surface, Mark.UNDERLINE)

        assert surface.html == "<p>a<u>b</u></p><p><u>c</u>d</p>"

    def test_code_spans_are_not_restyled(self) -> None:
        surface = surface_with("<p>a<code>b</code>c</p>", "abc")

        toggle_inline(surface, Mark.BOLD)

        assert surface.html == "<p><strong>a</strong><code>b</code><strong>c</strong></p>"

    def test_code_block_suppresses_toggle(self) -> None:
        surface = surface_with("<pre><code>x = 1</code></pre>", "x")

        assert not toggle_inline(surface, Mark.BOLD)
        assert surface.html == "<pre><code>x = 1</code></pre>"

    def test_no_selection(self) -> None:
        assert not toggle_inline(surface_with("<p>a</p>"), Mark.BOLD)

    def test_collapsed_toggle_sets_typing_style(self) -> None:
        surface = surface_with("<p><strong>ab</strong></p>")
        surface.selection = caret_after(surface.document, "ab")

        assert not toggle_inline(surface, Mark.ITALIC)

        assert surface.html == "<p><strong>ab</strong></p>"
        assert surface.typing_style is not None
        assert surface.typing_style.marks == {Mark.BOLD, Mark.ITALIC}

    def test_collapsed_double_toggle_cancels(self) -> None:
        surface = surface_with("<p>ab</p>")
        surface.selection = caret_after(surface.document, "ab")

        toggle_inline(surface, Mark.BOLD)
        toggle_inline(surface, Mark.BOLD)

        assert surface.typing_style is not None
        assert surface.typing_style.marks == frozenset()


def test_styleable_runs_split_at_range_ends() -> None:
    surface = surface_with("<p>abcdef</p>")
    block = surface.document.blocks[0]

    runs = styleable_runs(surface.document, Position(block, 2), Position(block, 4))

    assert [run.text for run in runs] == ["cd"]
    assert block.text_content() == "abcdef"


# --- Wraps ---


class TestWrapSelection:
    """Test wrapping selections in code spans and fonts."""

    def test_range_becomes_code_span(self) -> None:
        surface = surface_with("<p>call <strong>run()</strong> now</p>", "run()")

        assert wrap_selection_as(surface, WrapKind.CODE)

        assert surface.html == "<p>call <code>run()</code> now</p>"

    def test_selection_collapses_to_end(self) -> None:
        surface = surface_with("<p>call run now</p>", "run")
        end = surface.selection.focus if surface.selection else None

        wrap_selection_as(surface, WrapKind.CODE)

        assert surface.selection == Selection(end, end)  # type: ignore[arg-type]

    def test_range_gets_font_family(self) -> None:
        surface = surface_with("<p>Hello world</p>", "world")

        wrap_selection_as(surface, WrapKind.FONT, "Georgia")

        assert surface.html == '<p>Hello <span style="font-family:Georgia">world</span></p>'

    def test_font_wrap_needs_family(self) -> None:
        surface = surface_with("<p>Hello</p>", "Hello")
        with pytest.raises(ValueError):
            wrap_selection_as(surface, WrapKind.FONT)

    def test_collapsed_code_wrap_captures_typing(self) -> None:
        surface = surface_with("<p>say </p>")
        surface.selection = caret_after(surface.document, "say ")

        wrap_selection_as(surface, WrapKind.CODE)
        insert_text(surface, "hi")

        assert surface.html == "<p>say <code>hi</code></p>"

    def test_collapsed_font_wrap_captures_typing(self) -> None:
        surface = surface_with("<p>a</p>")
        surface.selection = caret_after(surface.document, "a")

        assert not wrap_selection_as(surface, WrapKind.FONT, "Verdana")
        insert_text(surface, "b")

        assert surface.html == '<p>a<span style="font-family:Verdana">b</span></p>'

    def test_code_block_suppresses_wrap(self) -> None:
        surface = surface_with("<pre><code>x</code></pre>", "x")
        assert not wrap_selection_as(surface, WrapKind.CODE)


# --- Typed input ---


class TestInsertText:
    """Test typed text placement and format inheritance."""

    def test_inherits_format_before_caret(self) -> None:
        surface = surface_with("<p><strong>ab</strong>cd</p>")
        surface.selection = caret_after(surface.document, "ab")

        caret = insert_text(surface, "X")

        assert surface.html == "<p><strong>abX</strong>cd</p>"
        assert caret is not None
        assert caret.offset == 3

    def test_typing_style_is_consumed(self) -> None:
        surface = surface_with("<p>ab</p>")
        surface.selection = caret_after(surface.document, "ab")
        toggle_inline(surface, Mark.BOLD)

        insert_text(surface, "c")

        assert surface.html == "<p>ab<strong>c</strong></p>"
        assert surface.typing_style is None

    def test_typing_style_ignored_after_caret_moves(self) -> None:
        surface = surface_with("<p>ab</p>")
        surface.selection = caret_after(surface.document, "ab")
        toggle_inline(surface, Mark.BOLD)
        surface.selection = caret_after(surface.document, "a")

        insert_text(surface, "x")

        assert surface.html == "<p>axb</p>"

    def test_text_after_link_stays_outside_it(self) -> None:
        """The link keeps showing exactly what its href points at."""
        surface = surface_with('<p>go <a href="https://a.example">a.example</a></p>')
        surface.selection = caret_after(surface.document, "a.example")

        insert_text(surface, "/do")
        insert_text(surface, "cs")

        block = surface.document.blocks[0]
        link = block.children[1]
        assert isinstance(link, Link)
        assert link.text_content() == "a.example"
        assert block.children[-1].text_content() == "/docs"
        assert block.text_content() == "go a.example/docs"

    def test_text_before_leading_link_stays_outside_it(self) -> None:
        surface = surface_with('<p><a href="https://a.example">link</a> tail</p>')
        surface.selection = Selection.caret(surface.document.blocks[0], 0)

        insert_text(surface, "x")

        block = surface.document.blocks[0]
        assert block.children[0].text_content() == "x"
        assert isinstance(block.children[1], Link)
        assert block.children[1].text_content() == "link"

    def test_range_is_replaced(self) -> None:
        surface = surface_with("<p>Hello world</p>", "world")

        insert_text(surface, "there")

        assert surface.html == "<p>Hello there</p>"

    def test_empty_block(self) -> None:
        surface = surface_with("<p></p>")
        surface.selection = Selection.caret(surface.document.blocks[0], 0)

        insert_text(surface, "x")

        assert surface.html == "<p>x</p>"

    def test_code_block_gets_plain_text(self) -> None:
        surface = surface_with("<pre><code>ab</code></pre>")
        surface.selection = caret_after(surface.document, "a")

        insert_text(surface, "<x>")

        assert surface.html == "<pre><code>a&lt;x&gt;b</code></pre>"

    def test_nothing_to_insert(self) -> None:
        surface = surface_with("<p>a</p>")
        surface.selection = caret_after(surface.document, "a")

        assert insert_text(surface, "") is None
