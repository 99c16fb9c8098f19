"""Reactive layer — the rebuild loop.

Connects source changes to browser reloads: debounce, rebuild, and
reload broadcasting over SSE.
"""

from whisker.reactive.broadcaster import ReloadBroadcaster, ReloadConnection, ReloadSignal
from whisker.reactive.debounce import CoalescedTrigger, Debouncer
from whisker.reactive.pipeline import ReloadPipeline
from whisker.reactive.rebuild import RebuildTrigger

__all__ = [
    "CoalescedTrigger",
    "Debouncer",
    "RebuildTrigger",
    "ReloadBroadcaster",
    "ReloadConnection",
    "ReloadPipeline",
    "ReloadSignal",
]
