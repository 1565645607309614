"""
Document-level pointer events.

The host UI translates its pointer/activation events into PointerEvents and
dispatches them on the session's EventTarget; listeners (the link guard) may
prevent the default action.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .document import Node

logger = logging.getLogger(__name__)

CLICK = "click"
POINTER_ENTER = "pointerenter"
POINTER_LEAVE = "pointerleave"


@dataclass
class PointerEvent:
    """A pointer interaction targeted at a document node."""

    type: str
    target: Node | None
    ctrl_key: bool = False
    meta_key: bool = False
    default_prevented: bool = field(default=False, init=False)
    propagation_stopped: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


Listener = Callable[[PointerEvent], None]


class EventTarget:
    """Synchronous listener registry keyed by event type."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def add_listener(self, event_type: str, listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def remove_listener(self, event_type: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch(self, event: PointerEvent) -> bool:
        """
        Deliver ``event`` to listeners in registration order.

        Returns True when the default action should proceed.
        """
        for listener in list(self._listeners.get(event.type, [])):
            listener(event)
            if event.propagation_stopped:
                logger.debug("Propagation of %s stopped", event.type)
                break
        return not event.default_prevented
