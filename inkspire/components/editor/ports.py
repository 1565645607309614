"""
Editor component - Port interfaces.
"""

from __future__ import annotations

from typing import Protocol

from .models import ChangeEvent


class ChangeListener(Protocol):
    """Receives a notification after every committed mutation."""

    def __call__(self, event: ChangeEvent) -> None:
        ...
