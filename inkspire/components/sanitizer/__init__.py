"""
Sanitizer component - allow-list sanitization of pasted markup.

Invariants:
- I1: Only allow-listed tags survive
- I2: Links keep href/target/rel only and carry noopener/noreferrer
- I3: No script content in output
- I4: Sanitizing twice equals sanitizing once
"""

from ._impl import (
    DEFAULT_CONFIG,
    MarkupSanitizer,
    SanitizeNote,
    SanitizerConfig,
    build_config,
    create_markup_sanitizer,
    is_safe_url,
    merge_rel,
    plain_text_to_markup,
    sanitize,
    sanitize_markup,
)
from .component import run_plain_text, run_sanitize
from .models import PlainTextInput, SanitizeMarkupInput, SanitizeOutput

__all__ = [
    "run_sanitize",
    "run_plain_text",
    "sanitize",
    "sanitize_markup",
    "plain_text_to_markup",
    "is_safe_url",
    "merge_rel",
    "build_config",
    "create_markup_sanitizer",
    "MarkupSanitizer",
    "SanitizerConfig",
    "SanitizeNote",
    "DEFAULT_CONFIG",
    "SanitizeMarkupInput",
    "PlainTextInput",
    "SanitizeOutput",
]
