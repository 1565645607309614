"""
External Link Guard - confirmation-gated navigation out of the document.

Key behaviors:
- Clicks on a link under a range selection touching it are left alone
- Other link clicks are intercepted; the href opens only after confirmation
- Confirmations run as asyncio tasks and are independent of each other
- Without a running event loop only a synchronous confirm can answer; an
  awaitable one is declined, so dispatching a click never blocks
- A confirmation that raises counts as declined and is logged
- Hover state on links is always paired and cleared on detach

Invariants:
- I1: Nothing opens after the guard is detached
- I2: Links are opened only through the injected opener
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import webbrowser
from collections.abc import Callable

from inkspire.domain.document import Link, Position, TextContainer
from inkspire.domain.events import CLICK, POINTER_ENTER, POINTER_LEAVE, PointerEvent

from .ports import ConfirmFn, GuardedSurface, OpenerFn
from .prompt import DEFAULT_PROMPT, console_confirm

logger = logging.getLogger(__name__)


def open_in_new_context(href: str) -> bool:
    """Open ``href`` in a new browser tab; the editor is never its opener."""
    return webbrowser.open_new_tab(href)


def link_span(link: Link) -> tuple[TextContainer, int, int] | None:
    """(container, start, end) character span covered by ``link``."""
    container = link.closest(TextContainer)
    if container is None:
        return None
    offsets = [
        (start, start + leaf.text_length)
        for leaf, start in container.leaves()
        if any(ancestor is link for ancestor in leaf.ancestors())
    ]
    if not offsets:
        return None
    return container, offsets[0][0], offsets[-1][1]


class ExternalLinkGuard:
    """Intercepts link activation on one editing surface."""

    def __init__(
        self,
        surface: GuardedSurface,
        confirm: ConfirmFn | None = None,
        opener: OpenerFn | None = None,
        *,
        prompt: str = DEFAULT_PROMPT,
        require_modifier: bool = False,
    ) -> None:
        self._surface = surface
        self._confirm = confirm or console_confirm(prompt)
        self._opener = opener or open_in_new_context
        self._require_modifier = require_modifier
        self._attached = False
        self._hovered: list[Link] = []
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def pending(self) -> int:
        """Confirmations still awaiting an answer."""
        return len(self._tasks)

    def attach(self) -> Callable[[], None]:
        """Subscribe to the surface's events. Returns the matching detach."""
        if not self._attached:
            events = self._surface.events
            events.add_listener(CLICK, self._on_click)
            events.add_listener(POINTER_ENTER, self._on_pointer_enter)
            events.add_listener(POINTER_LEAVE, self._on_pointer_leave)
            self._attached = True
        return self.detach

    def detach(self) -> None:
        if not self._attached:
            return
        events = self._surface.events
        events.remove_listener(CLICK, self._on_click)
        events.remove_listener(POINTER_ENTER, self._on_pointer_enter)
        events.remove_listener(POINTER_LEAVE, self._on_pointer_leave)
        for link in self._hovered:
            link.hovered = False
        self._hovered.clear()
        self._attached = False

    # --- Event handlers ---

    def _on_click(self, event: PointerEvent) -> None:
        link = event.target.closest(Link) if event.target is not None else None
        if link is None or not link.href:
            return
        if not self._surface.document.contains(link):
            return
        if self._require_modifier and not (event.ctrl_key or event.meta_key):
            return
        if self._selection_touches(link):
            logger.debug("Click on %s is part of a text selection; not intercepted", link.href)
            return

        event.prevent_default()
        event.stop_propagation()
        self._schedule(link.href)

    def _on_pointer_enter(self, event: PointerEvent) -> None:
        link = event.target.closest(Link) if event.target is not None else None
        if link is None:
            return
        link.hovered = True
        if not any(seen is link for seen in self._hovered):
            self._hovered.append(link)

    def _on_pointer_leave(self, event: PointerEvent) -> None:
        link = event.target.closest(Link) if event.target is not None else None
        if link is None:
            return
        link.hovered = False
        self._hovered = [seen for seen in self._hovered if seen is not link]

    # --- Confirmation ---

    def _selection_touches(self, link: Link) -> bool:
        selection = self._surface.selection
        document = self._surface.document
        if selection is None or selection.collapsed or not selection.is_attached(document):
            return False
        span = link_span(link)
        if span is None:
            return False
        container, link_start, link_end = span
        start, end = selection.ordered(document)
        return document.position_key(start) < document.position_key(
            Position(container, link_end)
        ) and document.position_key(end) > document.position_key(Position(container, link_start))

    def _schedule(self, href: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.confirm_inline(href)
            return
        task = loop.create_task(self.confirm_and_open(href))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def confirm_and_open(self, href: str) -> bool:
        """Await confirmation for ``href`` and open it when accepted."""
        try:
            answer = self._confirm(href)
            ok = await answer if inspect.isawaitable(answer) else bool(answer)
        except Exception:
            logger.warning(
                "Link confirmation for %s failed; treated as declined", href, exc_info=True
            )
            return False
        return self._open_if(href, ok)

    def confirm_inline(self, href: str) -> bool:
        """Settle a confirmation synchronously, for callers without an event loop."""
        try:
            answer = self._confirm(href)
        except Exception:
            logger.warning(
                "Link confirmation for %s failed; treated as declined", href, exc_info=True
            )
            return False
        if inspect.isawaitable(answer):
            if inspect.iscoroutine(answer):
                answer.close()
            logger.warning(
                "Confirmation for %s needs a running event loop; treated as declined", href
            )
            return False
        return self._open_if(href, bool(answer))

    def _open_if(self, href: str, ok: bool) -> bool:
        if not ok:
            logger.debug("Navigation to %s declined", href)
            return False
        if not self._attached:
            logger.debug("Guard detached before confirmation of %s; ignoring", href)
            return False

        logger.info("Opening external link %s", href)
        self._opener(href)
        return True
