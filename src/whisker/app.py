"""Whisker application — one-shot builds and the live-reloading server.

The two public functions (build, serve) are the primary entry points.
``serve`` wires the shared objects once and hands them to the pieces that
need them: the reload broadcaster goes to both the SSE endpoint and the
rebuild trigger, and the collector goes everywhere events are produced.
"""

import asyncio
import contextlib
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from whisker._errors import WhiskerError
from whisker.config import WhiskerConfig
from whisker.config_loader import load_config
from whisker.export.builder import BuildResult, build_site
from whisker.export.livereload import RELOAD_ENDPOINT, STATS_ENDPOINT
from whisker.observability import EventLog, StackCollector

if TYPE_CHECKING:
    from chirp import App

    from whisker.reactive.broadcaster import ReloadBroadcaster
    from whisker.reactive.pipeline import ReloadPipeline


def create_app(
    config: WhiskerConfig,
    broadcaster: ReloadBroadcaster,
    collector: StackCollector,
    *,
    live_reload: bool = True,
) -> App:
    """Create the Chirp app that serves the output tree.

    Middleware order (outermost first): live reload injection, then static
    files from the output directory.  Requests that match no file fall
    through to the reload routes and finally to Chirp's 404.

    """
    from chirp import App, AppConfig
    from chirp.middleware import StaticFiles

    from whisker.export.livereload import live_reload_middleware
    from whisker.theme import get_template_dirs

    app = App(
        config=AppConfig(
            template_dir=get_template_dirs(config)[-1],
            debug=False,
            host=config.host,
            port=config.port,
        )
    )

    if live_reload:
        app.add_middleware(live_reload_middleware())
    app.add_middleware(
        StaticFiles(
            directory=config.output_path,
            prefix="/",
            index="index.html",
            cache_control="no-cache",
        )
    )

    _register_reload_endpoints(app, config, broadcaster, collector)
    return app


def _register_reload_endpoints(
    app: App,
    config: WhiskerConfig,
    broadcaster: ReloadBroadcaster,
    collector: StackCollector,
) -> None:
    """Register the reload event stream and the stats endpoint."""
    from chirp import EventStream
    from chirp.http.request import Request
    from chirp.http.response import Response

    async def reload_events(request: Request) -> Any:
        return EventStream(
            broadcaster.client_stream(),
            heartbeat_interval=config.keepalive_s,
        )

    async def reload_stats(request: Request) -> Any:
        payload = json.dumps(
            {
                "clients": broadcaster.client_count,
                "pending_reloads": broadcaster.pending,
                "event_log": collector.log.stats(),
            },
            indent=2,
        )
        return Response(body=payload, status=200, content_type="application/json")

    app.route(RELOAD_ENDPOINT, name="whisker:reload-events")(reload_events)
    app.route(STATS_ENDPOINT, name="whisker:reload-stats")(reload_stats)


def _start_reload_loop(
    app: App,
    config: WhiskerConfig,
    broadcaster: ReloadBroadcaster,
    collector: StackCollector,
) -> ReloadPipeline:
    """Wire watcher → debounce → rebuild → broadcast via Chirp lifecycle hooks.

    Registers ``on_startup`` / ``on_shutdown`` hooks on *app* so that every
    task lives inside the event loop managed by Pounce.

    Flow:
        on_startup  → spawn the broadcaster dispatcher and the pipeline tasks
        file change → debounce → rebuild (worker thread) → publish reload
        on_shutdown → stop the watcher, cancel the tasks

    Returns the ReloadPipeline (for external reference, if needed).

    """
    from whisker.content.watcher import ContentWatcher
    from whisker.reactive.pipeline import ReloadPipeline
    from whisker.reactive.rebuild import RebuildTrigger

    watcher = ContentWatcher(config, collector=collector)
    trigger = RebuildTrigger(config, broadcaster, collector=collector)
    pipeline = ReloadPipeline(watcher, trigger, delay_s=config.debounce_s)
    _dispatcher: asyncio.Task[None] | None = None

    @app.on_startup
    async def _start_reload_tasks() -> None:
        nonlocal _dispatcher
        _dispatcher = asyncio.create_task(broadcaster.run(), name="whisker-reload-dispatch")
        pipeline.start()

    @app.on_shutdown
    async def _stop_reload_tasks() -> None:
        await pipeline.stop()
        if _dispatcher is not None and not _dispatcher.done():
            _dispatcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await _dispatcher

    return pipeline


def _print_build_summary(result: BuildResult) -> None:
    """Print build completion summary to stderr."""
    lines = [
        "",
        "─" * 41,
        f"  Built {result.total_pages} page{'s' if result.total_pages != 1 else ''}",
    ]
    if result.drafts_skipped > 0:
        lines.append(
            f"  Skipped {result.drafts_skipped} draft{'s' if result.drafts_skipped != 1 else ''}"
        )
    if result.load_errors > 0:
        lines.append(
            f"  {result.load_errors} document{'s' if result.load_errors != 1 else ''}"
            " could not be loaded"
        )
    lines.append(f"  Output: {result.output_dir}")
    lines.append(f"  Done in {result.duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def build(root: str | Path = ".", **kwargs: object) -> BuildResult:
    """Build the site once into the output directory.

    Args:
        root: Path to the site root directory.
        **kwargs: Override WhiskerConfig fields.

    Raises:
        BuildError: If the output tree cannot be written.

    """
    from whisker.banner import print_banner

    config = load_config(Path(root), **kwargs)
    print_banner(config, mode="build")

    result = build_site(config)
    _print_build_summary(result)
    return result


def serve(root: str | Path = ".", **kwargs: object) -> None:
    """Build the site, then serve it with live reload until interrupted.

    Launches a single-worker Pounce server.  The watcher, debouncer,
    rebuild worker, and reload dispatcher all run on the server's event
    loop.  A failed initial build is reported but does not stop the
    server: the previous output, if any, is still served and the next
    successful rebuild replaces it.

    Args:
        root: Path to the site root directory.
        **kwargs: Override WhiskerConfig fields.

    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    from whisker.banner import print_banner
    from whisker.reactive.broadcaster import ReloadBroadcaster

    config = load_config(Path(root), **kwargs)
    collector = StackCollector(EventLog())

    page_count = 0
    warnings: list[str] = []
    try:
        result = build_site(config, collector=collector)
        page_count = result.total_pages
        load_ms = result.duration_ms
        if result.load_errors:
            warnings.append(f"{result.load_errors} document(s) skipped, see above")
    except WhiskerError as exc:
        print(f"  ❌ Initial build failed: {exc}", file=sys.stderr)
        warnings.append("initial build failed; serving previous output")
        load_ms = 0.0

    broadcaster = ReloadBroadcaster(
        buffer_size=config.reload_buffer,
        client_buffer=config.reload_buffer,
        collector=collector,
    )
    app = create_app(config, broadcaster, collector)
    _start_reload_loop(app, config, broadcaster, collector)

    print_banner(
        config, mode="serve",
        page_count=page_count,
        load_ms=load_ms,
        warnings=warnings,
    )

    # Single worker: the reload loop and every SSE stream must share one
    # event loop and one broadcaster.
    server_config = ServerConfig(host=config.host, port=config.port, workers=1)
    server = Server(server_config, app, lifecycle_collector=collector)
    server.run()
