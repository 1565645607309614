"""
Linkguard component unit tests.

Tests for click interception, confirmation handling, hover state and the
confirmation prompt.
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser

import pytest

from inkspire.components.linkguard import (
    ConfirmationPrompt,
    ConfirmFn,
    ExternalLinkGuard,
    console_confirm,
    link_span,
    open_in_new_context,
)
from inkspire.domain.document import Document, Link, Node, Position, Selection, Text
from inkspire.domain.events import CLICK, POINTER_ENTER, POINTER_LEAVE, EventTarget, PointerEvent
from inkspire.domain.markup import parse_markup

MARKUP = '<p>go <a href="https://x.example">here</a> now</p>'

# --- Mock Surface ---


class MockSurface:
    """In-memory guarded surface for testing."""

    def __init__(self, markup: str = MARKUP) -> None:
        self.document: Document = parse_markup(markup)
        self.selection: Selection | None = None
        self.events = EventTarget()

    @property
    def link(self) -> Link:
        for node in self.document.walk():
            if isinstance(node, Link):
                return node
        raise AssertionError("no link in document")

    def click(self, target: Node | None = None, **keys: bool) -> PointerEvent:
        event = PointerEvent(CLICK, target or self.link.children[0], **keys)
        self.events.dispatch(event)
        return event


def accept(href: str) -> bool:
    return True


def decline(href: str) -> bool:
    return False


@pytest.fixture
def surface() -> MockSurface:
    return MockSurface()


@pytest.fixture
def opened() -> list[str]:
    return []


def attached_guard(
    surface: MockSurface,
    opened: list[str],
    confirm: ConfirmFn = accept,
    require_modifier: bool = False,
) -> ExternalLinkGuard:
    guard = ExternalLinkGuard(
        surface, confirm, opened.append, require_modifier=require_modifier
    )
    guard.attach()
    return guard


# --- Interception Tests ---


class TestInterception:
    """Test which clicks the guard intercepts."""

    def test_click_with_caret_is_intercepted(
        self, surface: MockSurface, opened: list[str]
    ) -> None:
        attached_guard(surface, opened)
        surface.selection = Selection.caret(surface.document.blocks[0], 0)

        event = surface.click()

        assert event.default_prevented
        assert event.propagation_stopped
        assert opened == ["https://x.example"]

    def test_click_without_selection_is_intercepted(
        self, surface: MockSurface, opened: list[str]
    ) -> None:
        attached_guard(surface, opened)
        assert surface.click().default_prevented

    def test_range_over_link_is_left_alone(self, surface: MockSurface, opened: list[str]) -> None:
        attached_guard(surface, opened)
        block = surface.document.blocks[0]
        surface.selection = Selection.across(block, 1, block, 4)

        event = surface.click()

        assert not event.default_prevented
        assert opened == []

    def test_range_elsewhere_is_intercepted(self, surface: MockSurface, opened: list[str]) -> None:
        attached_guard(surface, opened)
        block = surface.document.blocks[0]
        surface.selection = Selection.across(block, 0, block, 2)

        assert surface.click().default_prevented

    def test_click_on_plain_text_is_ignored(self, surface: MockSurface, opened: list[str]) -> None:
        attached_guard(surface, opened)

        event = surface.click(surface.document.blocks[0].children[0])

        assert not event.default_prevented

    def test_link_without_href_is_ignored(self, opened: list[str]) -> None:
        surface = MockSurface('<p><a href="">x</a></p>')
        attached_guard(surface, opened)

        assert not surface.click().default_prevented

    def test_modifier_requirement(self, surface: MockSurface, opened: list[str]) -> None:
        attached_guard(surface, opened, require_modifier=True)

        assert not surface.click().default_prevented
        assert surface.click(ctrl_key=True).default_prevented
        assert surface.click(meta_key=True).default_prevented
        assert opened == ["https://x.example", "https://x.example"]

    def test_detached_guard_does_nothing(self, surface: MockSurface, opened: list[str]) -> None:
        detach = attached_guard(surface, opened).attach()
        detach()

        assert not surface.click().default_prevented
        assert surface.events.listener_count(CLICK) == 0


# --- Confirmation Tests ---


class TestConfirmation:
    """Test the confirmation outcome handling."""

    def test_declined(self, surface: MockSurface, opened: list[str]) -> None:
        attached_guard(surface, opened, confirm=decline)

        event = surface.click()

        assert event.default_prevented
        assert opened == []

    def test_sync_confirm_is_supported(self, surface: MockSurface, opened: list[str]) -> None:
        attached_guard(surface, opened, confirm=lambda href: href.startswith("https://"))
        surface.click()
        assert opened == ["https://x.example"]

    def test_raising_confirm_counts_as_declined(
        self,
        surface: MockSurface,
        opened: list[str],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        async def broken(href: str) -> bool:
            raise RuntimeError("dialog crashed")

        guard = attached_guard(surface, opened, confirm=broken)

        with caplog.at_level(logging.WARNING):
            assert asyncio.run(guard.confirm_and_open("https://x.example")) is False
        assert opened == []
        assert "treated as declined" in caplog.text

    def test_async_confirm_without_loop_does_not_block(
        self,
        surface: MockSurface,
        opened: list[str],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A dialog-driven confirm cannot be answered without a loop; the click returns."""
        prompt = ConfirmationPrompt()
        attached_guard(surface, opened, confirm=prompt)

        with caplog.at_level(logging.WARNING):
            event = surface.click()

        assert event.default_prevented
        assert opened == []
        assert not prompt.is_open
        assert "needs a running event loop" in caplog.text

    def test_sync_confirm_settles_inline(self, surface: MockSurface, opened: list[str]) -> None:
        guard = attached_guard(surface, opened)

        assert guard.confirm_inline("https://y.example") is True
        assert opened == ["https://y.example"]
        assert guard.pending == 0

    def test_waits_for_prompt_and_tracks_pending(
        self, surface: MockSurface, opened: list[str]
    ) -> None:
        async def scenario() -> tuple[int, list[str], int]:
            prompt = ConfirmationPrompt()
            guard = attached_guard(surface, opened, confirm=prompt)
            surface.click()
            await asyncio.sleep(0)
            pending = guard.pending
            before = list(opened)
            prompt.close(True)
            for _ in range(3):
                await asyncio.sleep(0)
            return pending, before, guard.pending

        pending, before, after = asyncio.run(scenario())

        assert (pending, before, after) == (1, [], 0)
        assert opened == ["https://x.example"]

    def test_detach_before_answer_blocks_navigation(
        self, surface: MockSurface, opened: list[str]
    ) -> None:
        async def scenario() -> None:
            prompt = ConfirmationPrompt()
            guard = attached_guard(surface, opened, confirm=prompt)
            surface.click()
            await asyncio.sleep(0)
            guard.detach()
            prompt.close(True)
            for _ in range(3):
                await asyncio.sleep(0)

        asyncio.run(scenario())

        assert opened == []


# --- Hover Tests ---


def test_hover_state_is_paired_and_cleared(surface: MockSurface, opened: list[str]) -> None:
    guard = attached_guard(surface, opened)
    link = surface.link

    surface.events.dispatch(PointerEvent(POINTER_ENTER, link.children[0]))
    assert link.hovered

    surface.events.dispatch(PointerEvent(POINTER_LEAVE, link))
    assert not link.hovered

    surface.events.dispatch(PointerEvent(POINTER_ENTER, link))
    guard.detach()
    assert not link.hovered


def test_attach_is_idempotent(surface: MockSurface, opened: list[str]) -> None:
    guard = attached_guard(surface, opened)
    guard.attach()

    assert surface.events.listener_count(CLICK) == 1
    assert guard.attached


def test_link_span() -> None:
    document = parse_markup('<p>ab<a href="https://x.example">c<strong>d</strong></a>e</p>')
    block = document.blocks[0]
    link = block.children[1]
    assert isinstance(link, Link)

    assert link_span(link) == (block, 2, 4)
    assert link_span(Link("https://x.example", [Text("x")])) is None


def test_selection_positions_are_document_ordered(surface: MockSurface) -> None:
    block = surface.document.blocks[0]
    backwards = Selection(Position(block, 5), Position(block, 1))
    assert backwards.ordered(surface.document)[0].offset == 1


# --- Prompt Tests ---


class TestConfirmationPrompt:
    """Test the single-slot confirmation prompt."""

    def test_close_resolves_request(self) -> None:
        async def scenario() -> tuple[bool, str | None, bool, bool]:
            prompt = ConfirmationPrompt()
            task = asyncio.create_task(prompt("https://a.example"))
            await asyncio.sleep(0)
            href = prompt.href
            closed = prompt.close(True)
            result = await task
            return result, href, closed, prompt.is_open

        assert asyncio.run(scenario()) == (True, "https://a.example", True, False)

    def test_close_without_request(self) -> None:
        assert ConfirmationPrompt().close(True) is False

    def test_newer_request_declines_older(self) -> None:
        async def scenario() -> tuple[bool, bool, str | None]:
            prompt = ConfirmationPrompt()
            first = asyncio.create_task(prompt("https://a.example"))
            await asyncio.sleep(0)
            second = asyncio.create_task(prompt("https://b.example"))
            await asyncio.sleep(0)
            href = prompt.href
            prompt.close(True)
            return await first, await second, href

        assert asyncio.run(scenario()) == (False, True, "https://b.example")


@pytest.mark.parametrize(
    "answer,expected", [("y", True), (" YES ", True), ("", False), ("n", False)]
)
def test_console_confirm(monkeypatch: pytest.MonkeyPatch, answer: str, expected: bool) -> None:
    prompts: list[str] = []

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        return answer

    monkeypatch.setattr("builtins.input", fake_input)

    assert console_confirm("Go to {href}?")("https://a.example") is expected
    assert prompts == ["Go to https://a.example? [y/N] "]


def test_open_in_new_context(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(webbrowser, "open_new_tab", lambda url: calls.append(url) or True)

    assert open_in_new_context("https://a.example") is True
    assert calls == ["https://a.example"]
