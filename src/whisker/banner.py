"""Startup banner — mode-aware status output on stderr.

Shows what is being built or served, where output goes, and where the
reload stream lives.  Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from whisker._types import WhiskerMode
    from whisker.config import WhiskerConfig

# ---------------------------------------------------------------------------
# ANSI styling, disabled under NO_COLOR (https://no-color.org) or TERM=dumb
# ---------------------------------------------------------------------------

def _color_enabled() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("TERM") == "dumb":
        return False
    isatty = getattr(sys.stderr, "isatty", None)
    return bool(isatty and isatty())


_ANSI_CODES = {"reset": 0, "bold": 1, "dim": 2, "green": 32, "yellow": 33, "cyan": 36}
_COLOR = _color_enabled()


def _sgr(name: str) -> str:
    return f"\033[{_ANSI_CODES[name]}m" if _COLOR else ""


_RESET, _BOLD, _DIM = _sgr("reset"), _sgr("bold"), _sgr("dim")
_CYAN, _GREEN, _YELLOW = _sgr("cyan"), _sgr("green"), _sgr("yellow")

# Badge color per mode
_BADGE_COLORS = {"build": _YELLOW, "serve": _GREEN}


def _mode_badge(mode: str) -> str:
    return f"{_BADGE_COLORS.get(mode, _DIM)}[{mode}]{_RESET}"


def _link(url: str) -> str:
    """Render *url* as an OSC 8 terminal hyperlink when color is on."""
    if not _COLOR:
        return url
    osc = "\033]8;;"
    st = "\033\\"
    return f"{osc}{url}{st}{_BOLD}{_CYAN}{url}{_RESET}{osc}{st}"


def print_banner(
    config: WhiskerConfig,
    mode: WhiskerMode,
    *,
    page_count: int | None = None,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the Whisker startup banner to stderr.

    Args:
        config: Resolved WhiskerConfig.
        mode: ``"build"`` or ``"serve"``.
        page_count: Posts published by the initial build, if one ran.
        load_ms: Duration of the initial build in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    from whisker import __version__
    from whisker.export.livereload import RELOAD_ENDPOINT

    header = f"  {_BOLD}Whisker{_RESET} {_DIM}v{__version__}{_RESET}  {_mode_badge(mode)}"

    lines: list[str] = [
        "",
        header,
        f"  {_DIM}{'─' * 43}{_RESET}",
        f"  {_DIM}├─{_RESET} posts: {_DIM}{config.content_path}{_RESET}",
        f"  {_DIM}├─{_RESET} templates: {_DIM}{config.templates_path}{_RESET}",
    ]

    if page_count is not None:
        pages_label = "page" if page_count == 1 else "pages"
        timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
        lines.append(f"  {_DIM}├─{_RESET} {page_count} {pages_label} built{timing}")

    if mode == "serve":
        lines.append(
            f"  {_DIM}├─{_RESET} {_GREEN}live reload{_RESET} "
            f"on {_DIM}{RELOAD_ENDPOINT}{_RESET}"
        )
    lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}")

    if mode == "serve":
        url = f"http://{config.host}:{config.port}"
        lines.append("")
        lines.append(f"  {_link(url)}")
        lines.append("")
        lines.append(f"  {_DIM}Watching for changes...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)
