"""Rebuild trigger — turn a coalesced change into a fresh site and a reload.

One cycle per trigger:

    1. Template change + ``template_command`` configured: run the command.
       On failure, log it and stop here; the output tree is left as is.
    2. Load every post and rebuild the site (in a worker thread, so the
       server keeps answering requests).
    3. On success, publish exactly one reload signal.

Failures are logged and recorded, never raised; the next trigger is an
independent full attempt.  A lock guarantees one cycle at a time.
"""

from __future__ import annotations

import asyncio
import sys
import time
from typing import TYPE_CHECKING

from whisker._errors import TemplateCommandError, WhiskerError
from whisker.export.builder import build_site

if TYPE_CHECKING:
    from whisker._types import SiteBuildFunc
    from whisker.config import WhiskerConfig
    from whisker.observability.collector import StackCollector
    from whisker.reactive.broadcaster import ReloadBroadcaster
    from whisker.reactive.debounce import CoalescedTrigger


async def run_template_command(config: WhiskerConfig) -> str:
    """Run the configured template regeneration command in the site root.

    Returns:
        Combined stdout/stderr of the command.

    Raises:
        TemplateCommandError: If the command cannot start or exits non-zero.

    """
    argv = config.template_command
    if not argv:
        return ""
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=config.root,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as exc:
        msg = f"Cannot run {argv[0]!r}: {exc}"
        raise TemplateCommandError(msg) from exc

    stdout, _ = await proc.communicate()
    output = stdout.decode("utf-8", errors="replace") if stdout else ""
    if proc.returncode != 0:
        msg = f"{' '.join(argv)} exited with status {proc.returncode}"
        raise TemplateCommandError(msg, returncode=proc.returncode, output=output)
    return output


class RebuildTrigger:
    """Runs rebuild cycles for coalesced triggers.

    Args:
        config: Site configuration.
        broadcaster: Reload channel notified after each successful rebuild.
        collector: Optional event collector.
        builder: End-to-end build function, ``build_site`` by default.

    """

    def __init__(
        self,
        config: WhiskerConfig,
        broadcaster: ReloadBroadcaster,
        *,
        collector: StackCollector | None = None,
        builder: SiteBuildFunc = build_site,
    ) -> None:
        self._config = config
        self._broadcaster = broadcaster
        self._collector = collector
        self._builder = builder
        self._lock = asyncio.Lock()

    async def run(self, trigger: CoalescedTrigger) -> bool:
        """Run one rebuild cycle.

        Returns:
            True if the site was rebuilt and a reload was published.

        """
        async with self._lock:
            t0 = time.perf_counter()
            trigger_path = str(trigger.path)
            print("  🔄 Regenerating site...", file=sys.stderr)

            if trigger.category == "template" and self._config.template_command:
                try:
                    await run_template_command(self._config)
                except TemplateCommandError as exc:
                    print(f"  ❌ Template command failed: {exc}", file=sys.stderr)
                    if exc.output:
                        print(exc.output.rstrip(), file=sys.stderr)
                    self._record_failure(trigger_path, "template", exc)
                    return False

            try:
                result = await asyncio.to_thread(
                    self._builder, self._config, collector=self._collector,
                )
            except (WhiskerError, OSError) as exc:
                print(f"  ❌ Error rebuilding: {exc}", file=sys.stderr)
                self._record_failure(trigger_path, "build", exc)
                return False

            queued = self._broadcaster.publish()
            elapsed = (time.perf_counter() - t0) * 1000
            print(
                f"  ↻ Rebuilt {result.total_pages} page"
                f"{'s' if result.total_pages != 1 else ''} in {elapsed:.0f}ms"
                f" ({trigger.path.name})",
                file=sys.stderr,
            )
            if self._collector is not None:
                self._collector.record_rebuild(
                    trigger_path,
                    category=trigger.category,
                    events=trigger.events,
                    reload_queued=queued,
                    duration_ms=elapsed,
                )
            return True

    def _record_failure(self, trigger_path: str, stage: str, exc: Exception) -> None:
        if self._collector is not None:
            self._collector.record_rebuild_failed(trigger_path, stage=stage, error=str(exc))  # type: ignore[arg-type]
