"""
Inline component - inline marks, wraps, typed input and toolbar state.
"""

from ._impl import (
    container_ranges,
    insert_text,
    run_before,
    styleable_runs,
    toggle_inline,
    wrap_selection_as,
)
from .models import ToolbarState, WrapKind
from .state import has_mark, match_font, read_active_formatting

__all__ = [
    "toggle_inline",
    "wrap_selection_as",
    "insert_text",
    "read_active_formatting",
    "container_ranges",
    "styleable_runs",
    "run_before",
    "has_mark",
    "match_font",
    "ToolbarState",
    "WrapKind",
]
