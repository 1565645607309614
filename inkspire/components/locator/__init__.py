"""
Locator component - selection range to block resolution.
"""

from ._impl import (
    anchor_container,
    enclosing_container,
    locate,
    locate_containers,
    top_level_block,
)

__all__ = [
    "locate",
    "locate_containers",
    "anchor_container",
    "enclosing_container",
    "top_level_block",
]
