"""
Confirmation sources for the link guard.

ConfirmationPrompt is what a confirmation dialog drives: the guard awaits
it on the running event loop, the dialog's close action resolves it.
console_confirm is the synchronous fallback when no dialog is wired up.
"""

from __future__ import annotations

import asyncio
import logging

from .ports import ConfirmFn

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Open external link?\n\n{href}"


class ConfirmationPrompt:
    """
    Single-slot confirmation request.

    At most one request is open. Opening a new one while another is still
    pending declines the older one. Each request resolves exactly once.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[bool] | None = None
        self._href: str | None = None

    @property
    def is_open(self) -> bool:
        return self._future is not None and not self._future.done()

    @property
    def href(self) -> str | None:
        """Target of the open request, for the dialog to display."""
        return self._href if self.is_open else None

    async def __call__(self, href: str) -> bool:
        loop = asyncio.get_running_loop()
        if self._future is not None and not self._future.done():
            logger.debug("Superseding open confirmation for %s", self._href)
            self._future.set_result(False)

        future: asyncio.Future[bool] = loop.create_future()
        self._future = future
        self._href = href
        try:
            return await future
        finally:
            if self._future is future:
                self._future = None
                self._href = None

    def close(self, result: bool) -> bool:
        """Resolve the open request. Returns False when nothing was open."""
        future = self._future
        if future is None or future.done():
            return False
        future.set_result(bool(result))
        return True


def console_confirm(prompt: str = DEFAULT_PROMPT) -> ConfirmFn:
    """Blocking yes/no question on the terminal, answered synchronously."""

    def confirm(href: str) -> bool:
        answer = input(f"{prompt.format(href=href)} [y/N] ")
        return answer.strip().lower() in {"y", "yes"}

    return confirm
