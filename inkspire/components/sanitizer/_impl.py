"""
Markup Sanitizer - reduces pasted markup to the editor's allow-list.

Key behaviors:
- Comments and other markup declarations are dropped
- Styled elements holding a lone non-breaking space are dropped
- Generic inline wrappers with presentational-only styling are unwrapped
- Remaining style attributes are stripped
- Disallowed tags are removed when unsafe, unwrapped otherwise
- Links keep href/target/rel only and always carry noopener/noreferrer
- Links with forbidden protocols are unwrapped, keeping their text

Invariants:
- I1: Output contains only allow-listed tags and link attributes
- I2: sanitize(sanitize(x)) == sanitize(x)
- I3: Unparseable input degrades to escaped plain text
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.dammit import EntitySubstitution
from bs4.element import PreformattedString
from bs4.formatter import HTMLFormatter

from inkspire.rules.models import EditorRules

logger = logging.getLogger(__name__)

NBSP = "\xa0"
ASCII_WHITESPACE = " \t\n\r\f"

# Escapes &, < and > only; void elements render as <br>
OUTPUT_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)


# --- Configuration ---


@dataclass(frozen=True)
class SanitizerConfig:
    """Sanitizer configuration from rules."""

    allowed_tags: frozenset[str]
    drop_tags: frozenset[str]
    inline_wrapper_tags: frozenset[str]
    link_attributes: tuple[str, ...]
    presentational_style: re.Pattern[str]
    forbidden_protocols: tuple[str, ...]
    link_target: str = "_blank"
    link_rel: tuple[str, ...] = field(default=("noopener", "noreferrer"))


def build_config(rules: EditorRules) -> SanitizerConfig:
    """Build the sanitizer configuration from the editor rules."""
    sanitizer = rules.sanitizer
    return SanitizerConfig(
        allowed_tags=frozenset(tag.lower() for tag in sanitizer.allowed_tags),
        drop_tags=frozenset(tag.lower() for tag in sanitizer.drop_tags),
        inline_wrapper_tags=frozenset(tag.lower() for tag in sanitizer.inline_wrapper_tags),
        link_attributes=tuple(sanitizer.link_attributes),
        presentational_style=re.compile(sanitizer.presentational_style_pattern, re.IGNORECASE),
        forbidden_protocols=tuple(p.lower() for p in sanitizer.forbidden_protocols),
        link_target=rules.links.target,
        link_rel=tuple(rules.links.rel),
    )


# Default configuration
DEFAULT_CONFIG = build_config(EditorRules())


# --- Notes ---


@dataclass
class SanitizeNote:
    """Something the sanitizer removed or rewrote."""

    code: str
    message: str
    tag: str | None = None


# --- URL helpers ---


def is_safe_url(url: str, config: SanitizerConfig = DEFAULT_CONFIG) -> bool:
    """
    Check if URL is safe (no forbidden protocols).

    Whitespace and control characters are ignored, so ``java\\tscript:`` is
    caught as well.
    """
    if not url:
        return True
    compact = "".join(ch for ch in url if ch.isprintable() and not ch.isspace()).lower()
    return not any(compact.startswith(protocol) for protocol in config.forbidden_protocols)


def merge_rel(existing: str | None, config: SanitizerConfig = DEFAULT_CONFIG) -> str:
    """Existing rel tokens plus the configured ones, without duplicates."""
    tokens = (existing or "").split()
    for token in config.link_rel:
        if token not in tokens:
            tokens.append(token)
    return " ".join(tokens)


# --- Sanitizer ---


class MarkupSanitizer:
    """
    Allow-list sanitizer for pasted markup.

    Walks every element in document order and applies the cleaning steps
    described in the module docstring.
    """

    def __init__(self, config: SanitizerConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> SanitizerConfig:
        return self._config

    def sanitize(self, raw: str | None) -> tuple[str, list[SanitizeNote]]:
        """Sanitize raw markup. Returns the clean markup and what was changed."""
        if not raw:
            return "", []
        try:
            soup = BeautifulSoup(raw, "html.parser", multi_valued_attributes=None)
        except (ParserRejectedMarkup, AssertionError, ValueError) as exc:
            logger.warning("Unparseable markup treated as plain text: %s", exc)
            note = SanitizeNote(code="unparseable", message=str(exc))
            return _finish(html.escape(raw, quote=False)), [note]

        notes: list[SanitizeNote] = []
        self._drop_declarations(soup, notes)
        for element in soup.find_all(True):
            if element.decomposed or element.parent is None:
                continue
            self._clean(element, notes)

        return _finish(soup.decode(formatter=OUTPUT_FORMATTER)), notes

    def _drop_declarations(self, soup: BeautifulSoup, notes: list[SanitizeNote]) -> None:
        for string in soup.find_all(string=True):
            if isinstance(string, PreformattedString):
                notes.append(SanitizeNote(code="dropped_comment", message=str(string)[:40]))
                string.extract()

    def _clean(self, element: Tag, notes: list[SanitizeNote]) -> None:
        config = self._config
        name = element.name.lower()
        style = element.get("style")

        if name in config.inline_wrapper_tags or style is not None:
            if style is not None and element.get_text().strip(ASCII_WHITESPACE) == NBSP:
                notes.append(SanitizeNote("dropped_nbsp", "spurious styled space", name))
                element.decompose()
                return
            only_text = all(isinstance(child, NavigableString) for child in element.contents)
            if (
                name in config.inline_wrapper_tags
                and only_text
                and config.presentational_style.search(style or "")
            ):
                notes.append(SanitizeNote("unwrapped_presentational", style or "", name))
                element.unwrap()
                return
            if style is not None:
                del element["style"]

        if name not in config.allowed_tags:
            if name in config.drop_tags:
                notes.append(SanitizeNote("removed_unsafe", f"<{name}> removed", name))
                element.decompose()
            else:
                element.unwrap()
            return

        if name == "a":
            self._clean_link(element, notes)
            return

        for attr in list(element.attrs):
            del element[attr]

    def _clean_link(self, link: Tag, notes: list[SanitizeNote]) -> None:
        config = self._config
        href = link.get("href")
        if href is not None and not is_safe_url(href, config):
            notes.append(SanitizeNote("unsafe_link", f"forbidden protocol in {href[:40]!r}", "a"))
            link.unwrap()
            return

        for attr in list(link.attrs):
            if attr not in config.link_attributes:
                del link[attr]
        link["rel"] = merge_rel(link.get("rel"), config)
        if not link.get("target"):
            link["target"] = config.link_target


def _finish(markup: str) -> str:
    return markup.replace(NBSP, " ").strip()


# --- Functional API ---


def sanitize_markup(
    raw: str | None,
    config: SanitizerConfig = DEFAULT_CONFIG,
) -> tuple[str, list[SanitizeNote]]:
    """Sanitize raw markup, returning clean markup and notes."""
    return MarkupSanitizer(config).sanitize(raw)


def sanitize(raw: str | None, config: SanitizerConfig = DEFAULT_CONFIG) -> str:
    """Sanitize raw markup."""
    markup, _ = sanitize_markup(raw, config)
    return markup


def plain_text_to_markup(text: str | None) -> str:
    """Escape clipboard text; line breaks become <br>."""
    if not text:
        return ""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return "<br>".join(html.escape(line, quote=False) for line in normalized.split("\n"))


# --- Factory ---


def create_markup_sanitizer(config: SanitizerConfig | None = None) -> MarkupSanitizer:
    """Create a MarkupSanitizer with optional configuration."""
    return MarkupSanitizer(config=config)
