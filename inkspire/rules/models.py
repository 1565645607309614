from pydantic import BaseModel, ConfigDict, Field


class SanitizerRules(BaseModel):
    allowed_tags: list[str] = Field(
        default_factory=lambda: [
            "p",
            "br",
            "b",
            "strong",
            "i",
            "em",
            "a",
            "ul",
            "ol",
            "li",
            "blockquote",
            "code",
            "pre",
            "h1",
            "h2",
            "h3",
            "h4",
        ]
    )
    # Removed with their content; everything else outside the allow-list is unwrapped
    drop_tags: list[str] = Field(
        default_factory=lambda: [
            "img",
            "table",
            "script",
            "style",
            "iframe",
            "object",
            "embed",
            "svg",
            "head",
            "title",
            "meta",
            "link",
            "noscript",
            "template",
        ]
    )
    inline_wrapper_tags: list[str] = Field(default_factory=lambda: ["span", "font"])
    link_attributes: list[str] = Field(default_factory=lambda: ["href", "target", "rel"])
    presentational_style_pattern: str = (
        r"(font-family|font-size|color|line-height|font-weight|font-style)\s*:"
    )
    forbidden_protocols: list[str] = Field(
        default_factory=lambda: ["javascript:", "data:", "vbscript:"]
    )


class LinkRules(BaseModel):
    target: str = "_blank"
    rel: list[str] = Field(default_factory=lambda: ["noopener", "noreferrer"])


class AutolinkRules(BaseModel):
    enabled: bool = True
    default_scheme: str = "https://"
    trailing_punctuation: str = ".,;:!?'\")"


class FontRule(BaseModel):
    label: str
    family: str


class DocumentRules(BaseModel):
    default_html: str = "<h2>Your Brand Story</h2><p>Start writing here...</p>"
    code_placeholder: str = "/* code */"
    migrate_legacy_markers: bool = False


class LinkGuardRules(BaseModel):
    prompt: str = "Open external link?\n\n{href}"
    # Only intercept clicks made with ctrl or meta held
    require_modifier: bool = False


class EditorRules(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rules_version: str = "1"
    sanitizer: SanitizerRules = Field(default_factory=SanitizerRules)
    links: LinkRules = Field(default_factory=LinkRules)
    autolink: AutolinkRules = Field(default_factory=AutolinkRules)
    fonts: list[FontRule] = Field(
        default_factory=lambda: [
            FontRule(label="Times New Roman", family="Times New Roman, Times, serif"),
            FontRule(label="Arial", family="Arial, Helvetica, sans-serif"),
            FontRule(label="Georgia", family="Georgia, serif"),
            FontRule(label="Courier New", family="Courier New, Courier, monospace"),
        ]
    )
    document: DocumentRules = Field(default_factory=DocumentRules)
    link_guard: LinkGuardRules = Field(default_factory=LinkGuardRules)
