"""
Blocks component - block kind, list, alignment and code block formatting.
"""

from ._impl import (
    decompose_list,
    insert_code_block,
    is_code_container,
    range_text,
    set_alignment,
    set_block_kind,
    wrap_as_list,
)
from .models import UNCHANGED, FormatResult

__all__ = [
    "set_block_kind",
    "wrap_as_list",
    "set_alignment",
    "insert_code_block",
    "decompose_list",
    "is_code_container",
    "range_text",
    "FormatResult",
    "UNCHANGED",
]
