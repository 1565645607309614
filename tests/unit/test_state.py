"""
Toolbar state reader unit tests.
"""

from __future__ import annotations

from inkspire.components.inline import ToolbarState, match_font, read_active_formatting
from inkspire.components.selection import TypingStyle
from inkspire.domain.document import Alignment, BlockKind, Mark, Selection
from inkspire.domain.markup import parse_markup, serialize
from inkspire.rules import EditorRules
from tests.conftest import caret_after, find_text

FONTS = EditorRules().fonts


class TestMarks:
    """Test mark detection."""

    def test_caret_reads_run_before(self) -> None:
        document = parse_markup("<p><strong>ab</strong>cd</p>")

        state = read_active_formatting(document, caret_after(document, "ab"))

        assert state.bold is True
        assert state.italic is False

    def test_range_needs_mark_on_every_run(self) -> None:
        document = parse_markup("<p><strong>ab</strong>cd</p>")

        assert read_active_formatting(document, find_text(document, "ab")).bold is True
        assert read_active_formatting(document, find_text(document, "bc")).bold is False

    def test_style_fallbacks(self) -> None:
        document = parse_markup(
            '<p><span style="font-weight:700">w</span>'
            '<span style="font-style:oblique">s</span>'
            '<span style="text-decoration:underline">d</span></p>'
        )

        assert read_active_formatting(document, find_text(document, "w")).bold is True
        assert read_active_formatting(document, find_text(document, "s")).italic is True
        assert read_active_formatting(document, find_text(document, "d")).underline is True

    def test_light_weight_is_not_bold(self) -> None:
        document = parse_markup('<p><span style="font-weight:400">w</span></p>')
        assert read_active_formatting(document, find_text(document, "w")).bold is False

    def test_heading_weight_does_not_count_as_bold(self) -> None:
        document = parse_markup('<h2><span style="font-weight:bold">Title</span></h2>')

        state = read_active_formatting(document, find_text(document, "Title"))

        assert state.bold is False
        assert state.heading == 2

    def test_multi_container_range_reports_no_marks(self) -> None:
        document = parse_markup("<p><strong>a</strong></p><p><strong>b</strong></p>")
        first, second = document.blocks

        state = read_active_formatting(document, Selection.across(first, 0, second, 1))

        assert state.bold is False

    def test_typing_style_wins_at_its_caret(self) -> None:
        document = parse_markup("<p>ab</p>")
        caret = caret_after(document, "ab")
        style = TypingStyle(caret=caret.anchor, marks=frozenset({Mark.UNDERLINE}))

        state = read_active_formatting(document, caret, style)

        assert state.underline is True


class TestBlockState:
    """Test block, list and alignment detection."""

    def test_list_item(self) -> None:
        document = parse_markup("<ol><li>one</li></ol>")

        state = read_active_formatting(document, caret_after(document, "on"))

        assert state.block == BlockKind.ORDERED_LIST
        assert state.list_type == BlockKind.ORDERED_LIST
        assert state.heading is None

    def test_alignment_comes_from_anchor_container(self) -> None:
        document = parse_markup('<p style="text-align:right">a</p><p>b</p>')
        first, second = document.blocks

        assert read_active_formatting(document, Selection.caret(first, 1)).alignment == (
            Alignment.RIGHT
        )
        assert read_active_formatting(document, Selection.caret(second, 1)).alignment == (
            Alignment.LEFT
        )

    def test_code_block(self) -> None:
        document = parse_markup("<pre><code>x</code></pre>")

        state = read_active_formatting(document, caret_after(document, "x"))

        assert state.in_code is True
        assert state.block == BlockKind.CODE_BLOCK


class TestFonts:
    """Test font family matching."""

    def test_known_font_label(self) -> None:
        document = parse_markup(
            '<p><span style="font-family:Georgia, serif">x</span></p>'
        )

        state = read_active_formatting(document, find_text(document, "x"), fonts=FONTS)

        assert state.font_family == "Georgia"

    def test_unknown_font_is_reported_verbatim(self) -> None:
        assert match_font(" Comic Sans ", FONTS) == "Comic Sans"
        assert match_font(None, FONTS) is None


def test_no_selection_gives_empty_state() -> None:
    document = parse_markup("<p>a</p>")
    assert read_active_formatting(document, None) == ToolbarState()


def test_reading_does_not_mutate() -> None:
    markup = "<p>ab<strong>cd</strong>ef</p>"
    document = parse_markup(markup)

    read_active_formatting(document, find_text(document, "bcde"))

    assert serialize(document) == markup
    assert len(document.blocks[0].children) == 3
