from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from inkspire.components.editor import ChangeEvent, EditorSession
from inkspire.domain.document import Document, Position, Selection
from inkspire.rules import EditorRules, load_rules


def find_text(document: Document, needle: str, occurrence: int = 0) -> Selection:
    """Range selection over the ``occurrence``-th match of ``needle``."""
    seen = 0
    for container in document.text_containers():
        text = container.text_content()
        start = text.find(needle)
        while start != -1:
            if seen == occurrence:
                return Selection(
                    Position(container, start), Position(container, start + len(needle))
                )
            seen += 1
            start = text.find(needle, start + 1)
    raise AssertionError(f"{needle!r} not found in document")


def caret_after(document: Document, needle: str) -> Selection:
    """Collapsed selection right after the first match of ``needle``."""
    match = find_text(document, needle)
    return Selection(match.focus, match.focus)


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def rules(project_root: Path) -> EditorRules:
    """Load REAL rules from project root."""
    rules_path = project_root / "rules.yaml"
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)


@pytest.fixture
def select_text() -> Callable[..., Selection]:
    return find_text


@pytest.fixture
def select_after() -> Callable[[Document, str], Selection]:
    return caret_after


@pytest.fixture
def changes() -> list[ChangeEvent]:
    return []


@pytest.fixture
def opened() -> list[str]:
    """URLs the session's link guard opened."""
    return []


@pytest.fixture
def session(
    rules: EditorRules, changes: list[ChangeEvent], opened: list[str]
) -> Iterator[EditorSession]:
    """
    Editor session with recording hooks.

    Link confirmations are accepted and recorded in ``opened`` instead of
    launching a browser.
    """

    def accept(href: str) -> bool:
        return True

    editor = EditorSession("content", rules, changes.append, confirm=accept, opener=opened.append)
    yield editor
    editor.close()
