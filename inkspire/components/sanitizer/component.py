"""
Sanitizer component - allow-list sanitization of pasted markup.

Invariants:
- I1: Only allow-listed tags survive
- I2: Links keep href/target/rel only and carry noopener/noreferrer
- I3: No script content in output
- I4: Sanitizing twice equals sanitizing once
"""

from __future__ import annotations

from inkspire.rules.models import EditorRules

from ._impl import (
    DEFAULT_CONFIG,
    SanitizerConfig,
    build_config,
    plain_text_to_markup,
    sanitize_markup,
)
from .models import PlainTextInput, SanitizeMarkupInput, SanitizeOutput


def _build_config(rules: EditorRules | None) -> SanitizerConfig:
    """Build sanitizer config from the editor rules."""
    if rules is None:
        return DEFAULT_CONFIG
    return build_config(rules)


# --- Component Entry Points ---


def run_sanitize(
    inp: SanitizeMarkupInput,
    *,
    rules: EditorRules | None = None,
) -> SanitizeOutput:
    """
    Sanitize pasted markup.

    Args:
        inp: Input containing the raw markup.
        rules: Optional editor rules for configuration.

    Returns:
        SanitizeOutput with clean markup and notes on what was removed.
    """
    config = _build_config(rules)
    markup, notes = sanitize_markup(inp.markup, config)
    return SanitizeOutput(markup=markup, notes=notes, success=True)


def run_plain_text(inp: PlainTextInput) -> SanitizeOutput:
    """Escape clipboard plain text into markup."""
    return SanitizeOutput(markup=plain_text_to_markup(inp.text))
