"""Content layer — posts on disk as Page records.

Handles Markdown conversion, page loading, and file watching for the
rebuild loop.
"""

from whisker.content.loader import LoadResult, load_pages, parse_page
from whisker.content.page import Page, slugify
from whisker.content.watcher import ChangeEvent, ContentWatcher, categorize_change

__all__ = [
    "ChangeEvent",
    "ContentWatcher",
    "LoadResult",
    "Page",
    "categorize_change",
    "load_pages",
    "parse_page",
    "slugify",
]
