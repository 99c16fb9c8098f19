"""Tests for whisker.content.watcher — change filtering and resilient watching."""

from __future__ import annotations

import asyncio
import io
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from watchfiles import Change

from whisker.config import WhiskerConfig
from whisker.content.watcher import ContentWatcher, categorize_change, to_change_event
from whisker.observability import StackCollector, WatchFailed


@pytest.fixture
def config(tmp_path: Path) -> WhiskerConfig:
    (tmp_path / "posts").mkdir()
    return WhiskerConfig(root=tmp_path, watch_retry_s=0.01)


class TestCategorizeChange:
    """categorize_change — which paths are sources."""

    def test_post(self, config: WhiskerConfig) -> None:
        assert categorize_change(config.content_path / "a.md", config) == "content"

    def test_post_in_subdirectory_ignored(self, config: WhiskerConfig) -> None:
        assert categorize_change(config.content_path / "drafts" / "a.md", config) is None

    def test_markdown_outside_posts_ignored(self, config: WhiskerConfig) -> None:
        assert categorize_change(config.root / "README.md", config) is None

    def test_template_anywhere_under_root(self, config: WhiskerConfig) -> None:
        assert categorize_change(config.templates_path / "post.html", config) == "template"
        assert categorize_change(config.root / "src" / "layout.html", config) == "template"

    def test_output_ignored(self, config: WhiskerConfig) -> None:
        assert categorize_change(config.output_path / "index.html", config) is None
        assert categorize_change(config.output_path, config) is None

    def test_other_suffix_ignored(self, config: WhiskerConfig) -> None:
        assert categorize_change(config.content_path / "image.png", config) is None

    def test_extension_case_insensitive(self, config: WhiskerConfig) -> None:
        assert categorize_change(config.content_path / "A.MD", config) == "content"

    def test_custom_template_extensions(self, tmp_path: Path) -> None:
        config = WhiskerConfig(root=tmp_path, template_extensions=(".html", ".templ"))
        assert categorize_change(tmp_path / "views" / "page.templ", config) == "template"


class TestToChangeEvent:
    """to_change_event — raw watchfiles changes to ChangeEvents."""

    def test_modified_post(self, config: WhiskerConfig) -> None:
        path = config.content_path / "a.md"
        event = to_change_event(Change.modified, str(path), config)
        assert event is not None
        assert event.path == path
        assert event.kind == "modified"
        assert event.category == "content"

    def test_added_template(self, config: WhiskerConfig) -> None:
        event = to_change_event(Change.added, str(config.templates_path / "x.html"), config)
        assert event is not None
        assert event.kind == "created"
        assert event.category == "template"

    def test_deletion_ignored(self, config: WhiskerConfig) -> None:
        assert to_change_event(Change.deleted, str(config.content_path / "a.md"), config) is None

    def test_irrelevant_path_ignored(self, config: WhiskerConfig) -> None:
        assert to_change_event(Change.modified, str(config.root / "notes.txt"), config) is None


class TestContentWatcher:
    """ContentWatcher.changes — filtering, failure recovery, stop."""

    def test_watch_paths_skip_missing(self, tmp_path: Path) -> None:
        config = WhiskerConfig(root=tmp_path)
        assert ContentWatcher(config).watch_paths() == (config.root,)

    def test_watch_paths_include_posts(self, config: WhiskerConfig) -> None:
        watcher = ContentWatcher(config)
        assert watcher.watch_paths() == (config.content_path, config.root)

    @pytest.mark.asyncio
    async def test_yields_relevant_changes_only(self, config: WhiskerConfig) -> None:
        post = config.content_path / "a.md"
        batch = {
            (Change.modified, str(post)),
            (Change.modified, str(config.output_path / "index.html")),
            (Change.deleted, str(config.content_path / "b.md")),
            (Change.modified, str(config.root / "notes.txt")),
        }

        async def _fake_awatch(*_args: object, **_kwargs: object):  # noqa: ANN202
            yield batch

        watcher = ContentWatcher(config)
        with patch("whisker.content.watcher.awatch", _fake_awatch):
            stream = watcher.changes()
            event = await asyncio.wait_for(anext(stream), timeout=1.0)
            watcher.stop()
            await stream.aclose()

        assert event.path == post
        assert not watcher.is_running

    @pytest.mark.asyncio
    async def test_resumes_after_failure(self, config: WhiskerConfig) -> None:
        post = config.content_path / "a.md"
        calls = 0

        async def _flaky_awatch(*_args: object, **_kwargs: object):  # noqa: ANN202
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("inotify limit reached")
            yield {(Change.modified, str(post))}

        collector = StackCollector()
        watcher = ContentWatcher(config, collector=collector)
        with (
            patch("whisker.content.watcher.awatch", _flaky_awatch),
            patch.object(sys, "stderr", io.StringIO()) as err,
        ):
            stream = watcher.changes()
            event = await asyncio.wait_for(anext(stream), timeout=1.0)
            watcher.stop()
            await stream.aclose()

        assert event.path == post
        assert calls == 2
        assert "Watcher error: inotify limit reached" in err.getvalue()
        failure = collector.log.latest(WatchFailed)
        assert failure is not None

    @pytest.mark.asyncio
    async def test_stop_ends_stream(self, config: WhiskerConfig) -> None:
        async def _idle_awatch(*_args: object, stop_event: asyncio.Event, **_kwargs: object):  # noqa: ANN202
            await stop_event.wait()
            return
            yield  # pragma: no cover

        watcher = ContentWatcher(config)
        with patch("whisker.content.watcher.awatch", _idle_awatch):

            async def consume() -> list[object]:
                return [event async for event in watcher.changes()]

            task = asyncio.create_task(consume())
            await asyncio.sleep(0.05)
            assert watcher.is_running
            watcher.stop()
            events = await asyncio.wait_for(task, timeout=1.0)

        assert events == []
        assert not watcher.is_running

    @pytest.mark.asyncio
    async def test_unexpected_end_is_reported_and_retried(self, config: WhiskerConfig) -> None:
        post = config.content_path / "a.md"
        calls = 0

        async def _short_awatch(*_args: object, **_kwargs: object):  # noqa: ANN202
            nonlocal calls
            calls += 1
            if calls > 1:
                yield {(Change.added, str(post))}

        collector = StackCollector()
        watcher = ContentWatcher(config, collector=collector)
        with (
            patch("whisker.content.watcher.awatch", _short_awatch),
            patch.object(sys, "stderr", io.StringIO()) as err,
        ):
            stream = watcher.changes()
            event = await asyncio.wait_for(anext(stream), timeout=1.0)
            watcher.stop()
            await stream.aclose()

        assert event.kind == "created"
        assert "watch ended unexpectedly" in err.getvalue()
        assert collector.log.latest(WatchFailed) is not None
