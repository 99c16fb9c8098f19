"""Markdown conversion — one document in, metadata and HTML out.

Thin boundary over Patitas: frontmatter is split with
``parse_frontmatter``, the body is parsed once with the table extension
enabled, and the same AST yields the HTML fragment, the first heading
(used as a title fallback), and an SEO description.

Never raises on malformed markup; Patitas renders what it can and broken
YAML frontmatter degrades to empty metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from patitas import HtmlRenderer, Markdown, extract_meta_description, extract_text, parse_frontmatter
from patitas.nodes import Heading

_MARKDOWN = Markdown(plugins=["table"])


@dataclass(frozen=True, slots=True)
class Converted:
    """Result of converting one document.

    Attributes:
        metadata: Frontmatter mapping (empty when absent or invalid).
        html: Rendered HTML fragment of the body.
        heading: Plain text of the first heading, or ``""``.
        description: Plain-text summary of the body, up to 160 characters.

    """

    metadata: dict[str, Any] = field(default_factory=dict)
    html: str = ""
    heading: str = ""
    description: str = ""


def convert_document(raw: str, *, source_file: str | None = None) -> Converted:
    """Convert raw document text into metadata plus an HTML fragment."""
    metadata, body = parse_frontmatter(raw)
    doc = _MARKDOWN.parse(body, source_file=source_file)
    html = HtmlRenderer(source=body).render(doc)

    heading = ""
    for block in doc.children:
        if isinstance(block, Heading):
            heading = extract_text(block, source=body).strip()
            break

    return Converted(
        metadata=metadata,
        html=html,
        heading=heading,
        description=extract_meta_description(doc, body),
    )
