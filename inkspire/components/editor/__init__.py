"""
Editor component - editing session, command surface and change notifications.
"""

from ._impl import EditorSession
from .component import run_command, run_load, run_paste
from .models import (
    ChangeEvent,
    Command,
    CommandError,
    CommandInput,
    CommandKind,
    CommandOutput,
    EditorValue,
    LoadInput,
    LoadOutput,
    PasteInput,
    PasteOutput,
    PastePayload,
    TextRange,
)
from .paste import insert_fragment
from .ports import ChangeListener

__all__ = [
    "EditorSession",
    "run_command",
    "run_load",
    "run_paste",
    "insert_fragment",
    "ChangeEvent",
    "ChangeListener",
    "Command",
    "CommandError",
    "CommandKind",
    "EditorValue",
    "PastePayload",
    "TextRange",
    "LoadInput",
    "LoadOutput",
    "CommandInput",
    "CommandOutput",
    "PasteInput",
    "PasteOutput",
]
