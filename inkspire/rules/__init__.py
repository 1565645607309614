from inkspire.rules.loader import load_rules
from inkspire.rules.models import (
    AutolinkRules,
    DocumentRules,
    EditorRules,
    FontRule,
    LinkGuardRules,
    LinkRules,
    SanitizerRules,
)

__all__ = [
    "load_rules",
    "EditorRules",
    "SanitizerRules",
    "LinkRules",
    "AutolinkRules",
    "FontRule",
    "DocumentRules",
    "LinkGuardRules",
]
