"""Whisker theme loader — template fallback chain and page rendering.

User templates (``templates/``) take priority.  When a template is not found
in the user directory, Kida falls through to the bundled default theme,
which ships ``index.html`` and ``post.html``.

Thread Safety:
    A PageRenderer owns its Kida environment and is created fresh for every
    build, so edited templates are always picked up.

"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from kida import Environment, FileSystemLoader

if TYPE_CHECKING:
    from collections.abc import Sequence

    from whisker.config import WhiskerConfig
    from whisker.content.page import Page

INDEX_TEMPLATE = "index.html"
POST_TEMPLATE = "post.html"


def _bundled_theme_path() -> Path:
    """Return the absolute path to the bundled default theme."""
    return Path(__file__).parent / "default"


def get_template_dirs(config: WhiskerConfig) -> list[Path]:
    """Return template directories in priority order.

    Returns:
        ``[user_templates_dir, bundled_default_templates]``

    Kida's loader searches in order, so user templates take priority.
    The user directory is included even if it does not exist yet (the
    user may create it while the server is running).

    """
    bundled = _bundled_theme_path() / "templates"
    user_dir = config.templates_path

    dirs: list[Path] = []
    if user_dir != bundled:
        dirs.append(user_dir)
    dirs.append(bundled)
    return dirs


class PageRenderer:
    """Renders the index and post pages through Kida.

    Args:
        config: Site configuration (template dirs, site title, base URL).

    """

    def __init__(self, config: WhiskerConfig) -> None:
        self._config = config
        self._env = Environment(
            loader=FileSystemLoader([str(d) for d in get_template_dirs(config)]),
            autoescape=True,
        )

    def _globals(self) -> dict[str, str]:
        return {
            "site_title": self._config.site_title,
            "base_url": self._config.base_url.rstrip("/"),
        }

    def render_index(self, pages: Sequence[Page]) -> str:
        """Render the index document listing *pages* in the given order."""
        template = self._env.get_template(INDEX_TEMPLATE)
        return template.render(pages=list(pages), **self._globals())

    def render_post(self, page: Page) -> str:
        """Render the full HTML document for one post."""
        template = self._env.get_template(POST_TEMPLATE)
        return template.render(page=page, **self._globals())
