"""Site builder — render pages into a fresh output tree.

Every build starts by deleting the output directory, then writes the index
and one ``<url>/index.html`` per published post.  The tree therefore always
mirrors the current set of posts, with no stale pages left behind.

Any failure to clear, render, or write aborts the build with BuildError;
a partial tree is never reported as a successful build.
"""

from __future__ import annotations

import shutil
import sys
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from whisker._errors import BuildError
from whisker.content.page import page_url
from whisker.export.seo import inject_seo_metadata

if TYPE_CHECKING:
    from collections.abc import Iterable

    from whisker.config import WhiskerConfig
    from whisker.content.page import Page
    from whisker.observability.collector import StackCollector
    from whisker.theme import PageRenderer


@dataclass(frozen=True, slots=True)
class BuiltFile:
    """Record of a single file written during a build.

    Attributes:
        url: URL path served by the file (``"/"`` for the index).
        output_path: Absolute filesystem path to the written file.
        size_bytes: Size of the written file in bytes.

    """

    url: str
    output_path: Path
    size_bytes: int


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Aggregate result of one full build.

    Attributes:
        files: All files written, index first.
        total_pages: Number of posts published.
        drafts_skipped: Number of drafts left out.
        load_errors: Number of documents skipped by the loader.
        duration_ms: Wall-clock time for the build.
        output_dir: Absolute path to the output directory.

    """

    files: tuple[BuiltFile, ...]
    total_pages: int
    drafts_skipped: int
    duration_ms: float
    output_dir: Path
    load_errors: int = 0


def publishable(pages: Iterable[Page]) -> list[Page]:
    """Drop drafts and order by date, newest first.

    The sort is stable, so posts sharing a date keep their load order.
    """
    return sorted((p for p in pages if not p.draft), key=lambda p: p.date, reverse=True)


def dedupe_urls(pages: Iterable[Page]) -> list[Page]:
    """Give every page its own URL.

    The first page to claim a URL keeps it.  Later pages resolving to the
    same ``/YYYY/MM/DD/<slug>/`` get a numeric suffix (``<slug>-2``,
    ``<slug>-3``, ...) and a warning on stderr.
    """
    seen: set[str] = set()
    unique: list[Page] = []
    for page in pages:
        if page.url in seen:
            n = 2
            while page_url(page.date, f"{page.slug}-{n}") in seen:
                n += 1
            slug = f"{page.slug}-{n}"
            renamed = replace(page, slug=slug, url=page_url(page.date, slug))
            print(
                f"  Warning: {page.source_path.name} shares URL {page.url}; "
                f"publishing at {renamed.url}",
                file=sys.stderr,
            )
            page = renamed
        seen.add(page.url)
        unique.append(page)
    return unique


class SiteBuilder:
    """Writes the static output tree for a set of pages.

    Args:
        config: Site configuration (output directory).
        renderer: Template renderer for index and post documents.

    """

    def __init__(self, config: WhiskerConfig, renderer: PageRenderer) -> None:
        self._config = config
        self._renderer = renderer

    def build(self, pages: Iterable[Page]) -> BuildResult:
        """Run the full build and return the result.

        Pipeline order:
            1. Filter drafts, sort by date descending, give each post its own URL
            2. Clean output directory
            3. Render and write the index
            4. Render each post, inject SEO tags, write it

        Raises:
            BuildError: If the output cannot be cleared, rendered, or written.

        """
        start = time.perf_counter()
        output_dir = self._config.output_path

        all_pages = list(pages)
        published = dedupe_urls(publishable(all_pages))

        self._clean_output(output_dir)

        files: list[BuiltFile] = [self._write_index(published, output_dir)]
        files.extend(self._write_post(page, output_dir) for page in published)

        return BuildResult(
            files=tuple(files),
            total_pages=len(published),
            drafts_skipped=len(all_pages) - len(published),
            duration_ms=(time.perf_counter() - start) * 1000,
            output_dir=output_dir,
        )

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _clean_output(self, output_dir: Path) -> None:
        """Remove and recreate the output directory."""
        try:
            if output_dir.exists():
                shutil.rmtree(output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Cannot reset output directory {output_dir}: {exc}"
            raise BuildError(msg) from exc

    def _write_index(self, pages: list[Page], output_dir: Path) -> BuiltFile:
        try:
            html = self._renderer.render_index(pages)
        except Exception as exc:
            msg = f"Failed to render index: {exc}"
            raise BuildError(msg) from exc
        filepath = self._url_to_filepath("/", output_dir)
        return BuiltFile(url="/", output_path=filepath, size_bytes=self._write_html(filepath, html))

    def _write_post(self, page: Page, output_dir: Path) -> BuiltFile:
        try:
            html = self._renderer.render_post(page)
        except Exception as exc:
            msg = f"Failed to render {page.url!r} ({page.source_path.name}): {exc}"
            raise BuildError(msg) from exc
        html = inject_seo_metadata(html, page)
        filepath = self._url_to_filepath(page.url, output_dir)
        return BuiltFile(url=page.url, output_path=filepath, size_bytes=self._write_html(filepath, html))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _url_to_filepath(url: str, output_dir: Path) -> Path:
        """Convert a URL path to an output file path.

        Clean URL convention:
            ``/``                    -> ``output/index.html``
            ``/2024/03/01/hello/``   -> ``output/2024/03/01/hello/index.html``

        """
        clean = url.strip("/")
        if not clean:
            return output_dir / "index.html"
        return output_dir / clean / "index.html"

    @staticmethod
    def _write_html(filepath: Path, html: str) -> int:
        """Write HTML content to a file, creating parent dirs as needed.

        Returns the size in bytes of the written file.

        """
        data = html.encode("utf-8")
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(data)
        except OSError as exc:
            msg = f"Cannot write {filepath}: {exc}"
            raise BuildError(msg) from exc
        return len(data)


def build_site(config: WhiskerConfig, *, collector: StackCollector | None = None) -> BuildResult:
    """Load every post and build the site end to end.

    Used for one-shot builds, the initial serve build, and every rebuild.
    The loader always re-reads files, so a build reflects the sources as
    they are when it runs.
    """
    from whisker.content.loader import load_pages
    from whisker.theme import PageRenderer

    start = time.perf_counter()
    loaded = load_pages(
        config.content_path,
        extensions=config.content_extensions,
        collector=collector,
    )
    built = SiteBuilder(config, PageRenderer(config)).build(loaded.pages)
    result = replace(
        built,
        duration_ms=(time.perf_counter() - start) * 1000,
        load_errors=len(loaded.errors),
    )
    if collector is not None:
        collector.record_build(
            pages=result.total_pages,
            drafts_skipped=result.drafts_skipped,
            load_errors=result.load_errors,
            duration_ms=result.duration_ms,
        )
    return result
