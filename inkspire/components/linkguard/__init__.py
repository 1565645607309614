"""
Linkguard component - confirmation-gated external navigation.
"""

from ._impl import ExternalLinkGuard, link_span, open_in_new_context
from .ports import ConfirmFn, GuardedSurface, OpenerFn
from .prompt import DEFAULT_PROMPT, ConfirmationPrompt, console_confirm

__all__ = [
    "ExternalLinkGuard",
    "ConfirmationPrompt",
    "console_confirm",
    "open_in_new_context",
    "link_span",
    "DEFAULT_PROMPT",
    "ConfirmFn",
    "OpenerFn",
    "GuardedSurface",
]
