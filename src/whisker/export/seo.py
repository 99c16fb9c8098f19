"""SEO meta tags for rendered posts.

Tags are inserted right after the first ``</title>``.  Documents without a
title element are returned unchanged.
"""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from whisker.content.page import Page

_TITLE_CLOSE = "</title>"


def seo_tags(page: Page) -> list[str]:
    """Build the description, keywords, Open Graph, and Twitter tags for *page*."""
    title = escape(page.title)
    description = escape(page.description)

    tags: list[str] = []
    if description:
        tags.append(f'<meta name="description" content="{description}">')
    if page.tags:
        tags.append(f'<meta name="keywords" content="{escape(", ".join(page.tags))}">')

    tags.append('<meta property="og:type" content="article">')
    tags.append(f'<meta property="og:title" content="{title}">')
    if description:
        tags.append(f'<meta property="og:description" content="{description}">')

    tags.append('<meta name="twitter:card" content="summary_large_image">')
    tags.append(f'<meta name="twitter:title" content="{title}">')
    if description:
        tags.append(f'<meta name="twitter:description" content="{description}">')
    return tags


def inject_seo_metadata(html: str, page: Page) -> str:
    """Insert SEO meta tags for *page* after the document's ``</title>``."""
    index = html.find(_TITLE_CLOSE)
    if index == -1:
        return html
    insert_at = index + len(_TITLE_CLOSE)
    block = "".join(f"\n  {tag}" for tag in seo_tags(page))
    return html[:insert_at] + block + html[insert_at:]
