"""
Sanitizer component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ._impl import SanitizeNote

# --- Input Models ---


@dataclass(frozen=True)
class SanitizeMarkupInput:
    """Input for sanitizing pasted markup."""

    markup: str | None


@dataclass(frozen=True)
class PlainTextInput:
    """Input for turning clipboard plain text into markup."""

    text: str | None


# --- Output Models ---


@dataclass(frozen=True)
class SanitizeOutput:
    """Output for sanitized markup."""

    markup: str
    notes: list[SanitizeNote] = field(default_factory=list)
    success: bool = True
