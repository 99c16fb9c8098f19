"""Shared test fixtures for whisker."""

from __future__ import annotations

from pathlib import Path

import pytest

from whisker.config import WhiskerConfig
from whisker.content.page import Page, page_url


def write_post(
    posts: Path,
    name: str,
    *,
    title: str | None = None,
    date: str | None = None,
    body: str = "Hello world.",
    **extra: object,
) -> Path:
    """Write a Markdown post with optional frontmatter fields."""
    fields: dict[str, object] = {}
    if title is not None:
        fields["title"] = title
    if date is not None:
        fields["date"] = date
    fields.update(extra)

    text = ""
    if fields:
        lines = [f"{key}: {value}" for key, value in fields.items()]
        text = "---\n" + "\n".join(lines) + "\n---\n\n"
    path = posts / name
    path.write_text(text + body + "\n", encoding="utf-8")
    return path


def make_page(
    title: str = "Test Post",
    date: str = "2024-01-01",
    *,
    slug: str | None = None,
    draft: bool = False,
    description: str = "",
    tags: tuple[str, ...] = (),
    html: str = "<p>Test content</p>",
) -> Page:
    """Create a Page without touching the filesystem."""
    slug = slug or title.lower().replace(" ", "-")
    return Page(
        title=title,
        date=date,
        slug=slug,
        url=page_url(date, slug),
        html=html,
        source_path=Path(f"/tmp/posts/{date}-{slug}.md"),
        draft=draft,
        description=description,
        tags=tags,
    )


@pytest.fixture
def tmp_blog(tmp_path: Path) -> Path:
    """Create a minimal blog: three dated posts and one draft under posts/.

    Returns the path to the site root.  Templates come from the bundled
    theme; there is no templates/ directory.
    """
    posts = tmp_path / "posts"
    posts.mkdir()
    write_post(posts, "2024-01-01-first.md", title="First Post", body="# First\n\nOne.")
    write_post(posts, "2024-03-01-third.md", title="Third Post", body="Three.")
    write_post(posts, "2024-02-01-second.md", title="Second Post", body="Two.")
    write_post(posts, "2024-04-01-wip.md", title="Work In Progress", draft="true")
    return tmp_path


@pytest.fixture
def blog_config(tmp_blog: Path) -> WhiskerConfig:
    """WhiskerConfig rooted at ``tmp_blog``."""
    return WhiskerConfig(root=tmp_blog)
