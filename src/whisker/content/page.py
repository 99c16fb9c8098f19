"""Page records and the naming rules that derive them.

A Page is the normalized, immutable form of one post, recreated on every
build.  The helpers here turn loose frontmatter values and filenames into
the URL-safe slug, ISO date, and display title a page needs.
"""

from __future__ import annotations

import datetime as dt
import re
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from whisker._errors import ContentError

if TYPE_CHECKING:
    from whisker._types import PageURL

_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:-(.*))?$")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

_FALLBACK_SLUG = "post"
_FALLBACK_TITLE = "Untitled"


@dataclass(frozen=True, slots=True)
class Page:
    """One published (or draft) post.

    Attributes:
        title: Display title, never empty.
        date: Publish date as ``YYYY-MM-DD``.
        slug: URL-safe slug: lowercase ASCII letters, digits, single hyphens.
        url: Canonical URL path, ``/YYYY/MM/DD/<slug>/``.
        html: Rendered HTML fragment of the post body.
        draft: Drafts are loaded but never published.
        source_path: Originating file, for diagnostics.
        description: Summary used for meta tags.
        tags: Keywords from frontmatter.

    """

    title: str
    date: str
    slug: str
    url: PageURL
    html: str
    source_path: Path
    draft: bool = False
    description: str = ""
    tags: tuple[str, ...] = field(default=())


def slugify(text: str) -> str:
    """Normalise *text* to a URL-safe slug.

    Accents are folded to ASCII, everything else that is not a letter or
    digit collapses to a single hyphen.  Returns ``"post"`` when nothing
    usable remains.

    >>> slugify("Héllo, Wörld!")
    'hello-world'

    """
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = _NON_ALNUM.sub("-", folded.lower()).strip("-")
    return slug or _FALLBACK_SLUG


def page_url(date: str, slug: str) -> PageURL:
    """Build the canonical ``/YYYY/MM/DD/<slug>/`` path."""
    year, month, day = date.split("-")
    return f"/{year}/{month}/{day}/{slug}/"


def split_filename(path: Path) -> tuple[str | None, str]:
    """Split ``2024-03-01-hello-world.md`` into ``("2024-03-01", "hello-world")``.

    Files without a date prefix return ``(None, stem)``.
    """
    stem = path.stem
    match = _DATE_PREFIX.match(stem)
    if match is None:
        return None, stem
    return match.group(1), match.group(2) or ""


def title_from_filename(path: Path) -> str:
    """Human-readable title from the slug part of a filename."""
    _, rest = split_filename(path)
    words = rest.replace("-", " ").replace("_", " ").split()
    return " ".join(words) or _FALLBACK_TITLE


def normalize_date(value: object, *, source: Path) -> str:
    """Coerce a frontmatter or filename date to ``YYYY-MM-DD``.

    Raises:
        ContentError: If the value is not a real calendar date.

    """
    if isinstance(value, dt.datetime):
        return value.date().isoformat()
    if isinstance(value, dt.date):
        return value.isoformat()
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return dt.date.fromisoformat(text).isoformat()
        except ValueError:
            pass
        try:
            return dt.datetime.fromisoformat(text).date().isoformat()
        except ValueError as exc:
            msg = f"{source.name}: invalid date {value!r}"
            raise ContentError(msg) from exc
    msg = f"{source.name}: invalid date {value!r}"
    raise ContentError(msg)


def normalize_tags(value: object) -> tuple[str, ...]:
    """Accept a YAML list or a comma-separated string of tags."""
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    if not isinstance(items, (list, tuple)):
        items = [items]
    return tuple(t for t in (str(item).strip() for item in items) if t)


def is_truthy(value: object) -> bool:
    """Interpret a frontmatter flag; quoted strings like ``"false"`` stay false."""
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "on", "1"}
    return bool(value)
