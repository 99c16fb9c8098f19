"""Content loader — turns the posts directory into Page records.

Each file is converted independently.  A document that cannot become a
valid page (unreadable, undecodable, missing or invalid date) is skipped
with a warning; one bad post never blocks the rest of the site.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from whisker._errors import ContentError
from whisker.content.convert import convert_document
from whisker.content.page import (
    Page,
    is_truthy,
    normalize_date,
    normalize_tags,
    page_url,
    slugify,
    split_filename,
    title_from_filename,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from whisker.observability.collector import StackCollector


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Pages loaded from a content directory plus the documents that were skipped.

    Attributes:
        pages: Successfully loaded pages, drafts included, in filename order.
        errors: ``(path, reason)`` for every skipped document.

    """

    pages: tuple[Page, ...]
    errors: tuple[tuple[Path, str], ...] = ()


def parse_page(path: Path) -> Page:
    """Read and convert one document into a Page.

    Title: ``title`` frontmatter, then the first heading, then the filename.
    Slug: ``slug`` frontmatter, then the title; both are normalised.
    Date: ``date`` frontmatter, then a ``YYYY-MM-DD-`` filename prefix.

    Raises:
        ContentError: If the file cannot be read, its frontmatter cannot be
            parsed, or it has no valid date.

    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"{path.name}: cannot read file: {exc}"
        raise ContentError(msg) from exc

    try:
        converted = convert_document(raw, source_file=str(path))
    except (ValueError, TypeError) as exc:
        # PyYAML raises plain ValueError for impossible timestamps (2024-02-30).
        msg = f"{path.name}: invalid frontmatter: {exc}"
        raise ContentError(msg) from exc
    meta = converted.metadata

    file_date, _ = split_filename(path)
    raw_date = meta.get("date") or file_date
    if raw_date is None:
        msg = f"{path.name}: missing date (add 'date:' frontmatter or a YYYY-MM-DD- filename prefix)"
        raise ContentError(msg)
    date = normalize_date(raw_date, source=path)

    title = str(meta.get("title") or "").strip() or converted.heading or title_from_filename(path)
    slug = slugify(str(meta.get("slug") or "").strip() or title)
    description = str(meta.get("description") or "").strip() or converted.description

    return Page(
        title=title,
        date=date,
        slug=slug,
        url=page_url(date, slug),
        html=converted.html,
        source_path=path,
        draft=is_truthy(meta.get("draft", False)),
        description=description,
        tags=normalize_tags(meta.get("tags")),
    )


def discover_sources(content_dir: Path, extensions: Iterable[str]) -> list[Path]:
    """List candidate documents directly inside *content_dir*, sorted by name.

    Raises:
        ContentError: If the directory cannot be listed.

    """
    suffixes = {ext.lower() for ext in extensions}
    try:
        return sorted(
            p for p in content_dir.iterdir()
            if p.is_file() and p.suffix.lower() in suffixes and not p.name.startswith(".")
        )
    except OSError as exc:
        msg = f"Cannot list content directory {content_dir}: {exc}"
        raise ContentError(msg) from exc


def load_pages(
    content_dir: Path,
    *,
    extensions: Iterable[str] = (".md",),
    collector: StackCollector | None = None,
) -> LoadResult:
    """Load every document in *content_dir*.

    Skipped documents are reported on stderr and, when a collector is
    given, recorded in the event log.  A missing directory yields an empty
    result rather than an error.

    Raises:
        ContentError: If the directory exists but cannot be listed.

    """
    if not content_dir.is_dir():
        print(f"  Warning: content directory {content_dir} not found", file=sys.stderr)
        return LoadResult(pages=())

    pages: list[Page] = []
    errors: list[tuple[Path, str]] = []

    for path in discover_sources(content_dir, extensions):
        try:
            pages.append(parse_page(path))
        except ContentError as exc:
            reason = str(exc)
            print(f"  Warning: skipping {path.name}: {reason}", file=sys.stderr)
            errors.append((path, reason))
            if collector is not None:
                collector.record_page_skipped(str(path), reason)

    return LoadResult(pages=tuple(pages), errors=tuple(errors))
