"""
Autolinker - turns URL-shaped text into links.

Key behaviors:
- Scans text runs outside links, code spans and code blocks
- Matches http(s)://..., www.... and bare host.tld[/path] shapes
- Trailing sentence punctuation is left outside the link
- Schemeless matches get the default scheme in href; display text is verbatim
- Surrounding text keeps the run's format as sibling runs

Invariants:
- I1: No characters are added, dropped or reordered
- I2: A second pass creates no additional or nested links
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from inkspire.components.blocks import is_code_container
from inkspire.domain.document import CodeSpan, Document, Link, Node, Text
from inkspire.rules.models import EditorRules

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(
    r"(?:https?://|www\.)[^\s<]+|(?:[a-z0-9-]+\.)+[a-z]{2,}(?:/[^\s<]*)?",
    re.IGNORECASE,
)
SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


# --- Configuration ---


@dataclass(frozen=True)
class AutolinkConfig:
    """Autolink configuration from rules."""

    enabled: bool = True
    default_scheme: str = "https://"
    trailing_punctuation: str = ".,;:!?'\")"
    target: str = "_blank"
    rel: str = "noopener noreferrer"


def build_config(rules: EditorRules) -> AutolinkConfig:
    return AutolinkConfig(
        enabled=rules.autolink.enabled,
        default_scheme=rules.autolink.default_scheme,
        trailing_punctuation=rules.autolink.trailing_punctuation,
        target=rules.links.target,
        rel=" ".join(rules.links.rel),
    )


DEFAULT_CONFIG = AutolinkConfig()


# --- Detection ---


def find_urls(text: str, config: AutolinkConfig = DEFAULT_CONFIG) -> list[tuple[int, int]]:
    """(start, end) spans of URL-shaped substrings, punctuation trimmed."""
    spans = []
    for match in URL_PATTERN.finditer(text):
        value = match.group().rstrip(config.trailing_punctuation)
        if not URL_PATTERN.fullmatch(value):
            continue
        spans.append((match.start(), match.start() + len(value)))
    return spans


def href_for(value: str, config: AutolinkConfig = DEFAULT_CONFIG) -> str:
    if SCHEME_PATTERN.match(value):
        return value
    return f"{config.default_scheme}{value}"


def linkable_runs(document: Document) -> list[Text]:
    """Non-blank text runs that may contain new links."""
    runs = []
    for container in document.text_containers():
        if is_code_container(container):
            continue
        for leaf, _ in container.leaves():
            if not isinstance(leaf, Text) or not leaf.text.strip():
                continue
            if leaf.closest(Link) is None and leaf.closest(CodeSpan) is None:
                runs.append(leaf)
    return runs


# --- Rewriting ---


def linkify_run(run: Text, config: AutolinkConfig = DEFAULT_CONFIG) -> int:
    """Replace URL substrings of ``run`` with links. Returns the link count."""
    spans = find_urls(run.text, config)
    parent = run.parent
    if not spans or parent is None:
        return 0

    text = run.text
    nodes: list[Node] = []
    last = 0
    for start, end in spans:
        if start > last:
            nodes.append(run.copy_format(text[last:start]))
        value = text[start:end]
        nodes.append(
            Link(
                href_for(value, config),
                [run.copy_format(value)],
                target=config.target,
                rel=config.rel,
            )
        )
        last = end
    if last < len(text):
        nodes.append(run.copy_format(text[last:]))

    parent.replace(run, nodes)
    return len(spans)


def autolink(document: Document, config: AutolinkConfig = DEFAULT_CONFIG) -> int:
    """Link every URL-shaped substring in the document. Returns links created."""
    if not config.enabled:
        return 0
    created = sum(linkify_run(run, config) for run in linkable_runs(document))
    if created:
        logger.debug("Autolinked %d URL(s)", created)
    return created
