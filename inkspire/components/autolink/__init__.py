"""
Autolink component - URL detection in document text.
"""

from ._impl import (
    DEFAULT_CONFIG,
    URL_PATTERN,
    AutolinkConfig,
    autolink,
    build_config,
    find_urls,
    href_for,
    linkable_runs,
    linkify_run,
)

__all__ = [
    "autolink",
    "find_urls",
    "href_for",
    "linkable_runs",
    "linkify_run",
    "build_config",
    "AutolinkConfig",
    "DEFAULT_CONFIG",
    "URL_PATTERN",
]
