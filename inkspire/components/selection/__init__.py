"""
Selection component - selection capture/restore and the editing surface port.
"""

from ._impl import SelectionTracker
from .models import TypingStyle
from .ports import EditingSurface

__all__ = [
    "SelectionTracker",
    "TypingStyle",
    "EditingSurface",
]
