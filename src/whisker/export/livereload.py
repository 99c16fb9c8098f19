"""Live reload — browser client for the reload event stream.

In serve mode the script below is injected before ``</body>`` of every
HTML page the server returns (via Chirp's ``HTMLInject`` middleware), so
the files on disk stay identical to a one-shot build.

The script opens an ``EventSource`` on the reload endpoint and reloads the
page on every ``reload`` message.  If the stream drops (server restarting)
it retries until the server answers again.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chirp.middleware import HTMLInject

RELOAD_ENDPOINT = "/_reload/events"
STATS_ENDPOINT = "/_reload/stats"

LIVE_RELOAD_MARKER = "data-whisker-reload"

LIVE_RELOAD_SCRIPT = f"""\
<script {LIVE_RELOAD_MARKER}>
(function() {{
  var src = new EventSource('{RELOAD_ENDPOINT}');
  src.onmessage = function(e) {{
    if (e.data === 'reload') location.reload();
  }};
  src.onerror = function() {{
    src.close();
    setTimeout(function() {{ location.reload(); }}, 1000);
  }};
}})();
</script>
"""


def live_reload_middleware() -> HTMLInject:
    """Chirp middleware injecting the live reload script into HTML responses."""
    from chirp.middleware import HTMLInject

    return HTMLInject(LIVE_RELOAD_SCRIPT)
