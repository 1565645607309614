"""
Linkguard component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Protocol

from inkspire.domain.document import Document, Selection
from inkspire.domain.events import EventTarget


class ConfirmFn(Protocol):
    """
    Asks the user whether to leave the document for ``href``.

    Dialog-driven confirms return an awaitable; console or test confirms may
    answer synchronously.
    """

    def __call__(self, href: str) -> Awaitable[bool] | bool:
        ...


class OpenerFn(Protocol):
    """Opens ``href`` in a new browsing context."""

    def __call__(self, href: str) -> object:
        ...


class GuardedSurface(Protocol):
    """What the guard needs from an editing session."""

    document: Document
    selection: Selection | None
    events: EventTarget
