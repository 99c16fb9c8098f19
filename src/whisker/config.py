"""Whisker configuration.

WhiskerConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path

from whisker._errors import ConfigError

# Chirp accepts EventStream heartbeats between one second and five minutes.
_MIN_KEEPALIVE_S = 1.0
_MAX_KEEPALIVE_S = 300.0


@dataclass(frozen=True, slots=True)
class WhiskerConfig:
    """Configuration for a Whisker site.

    Attributes:
        root: Path to the site root directory (contains posts/, templates/).
              Always resolved to an absolute path on construction.
        host: Bind address for serve mode.
        port: Bind port for serve mode.
        output: Output directory for the generated site.
        content_dir: Directory containing Markdown posts.
        templates_dir: Directory containing Kida templates that override the
            bundled theme.
        site_title: Title shown on the index page and in page titles.
        base_url: Absolute site URL, used for canonical links when set.
        debounce_ms: Quiet interval before a burst of changes triggers a rebuild.
        keepalive_s: Idle interval between keepalive comments on the reload stream.
        reload_buffer: Capacity of the shared reload signal buffer.
        watch_retry_s: Delay before watching resumes after a watcher failure.
        content_extensions: File suffixes treated as posts.
        template_extensions: File suffixes treated as template sources.
        template_command: Optional argv run before rebuilding on template changes.

    """

    root: Path = field(default_factory=Path.cwd)
    host: str = "127.0.0.1"
    port: int = 8080
    output: Path = field(default_factory=lambda: Path("public"))
    content_dir: str = "posts"
    templates_dir: str = "templates"
    site_title: str = "Blog"
    base_url: str = ""
    debounce_ms: int = 100
    keepalive_s: float = 30.0
    reload_buffer: int = 10
    watch_retry_s: float = 1.0
    content_extensions: tuple[str, ...] = (".md",)
    template_extensions: tuple[str, ...] = (".html",)
    template_command: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        # Resolve root to absolute so that watchfiles (which returns
        # absolute paths) can be compared via Path.relative_to().
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

        if self.debounce_ms <= 0:
            msg = f"debounce_ms must be positive, got {self.debounce_ms}"
            raise ConfigError(msg)
        if not _MIN_KEEPALIVE_S <= self.keepalive_s <= _MAX_KEEPALIVE_S:
            msg = (
                f"keepalive_s must be between {_MIN_KEEPALIVE_S}s and {_MAX_KEEPALIVE_S}s,"
                f" got {self.keepalive_s}"
            )
            raise ConfigError(msg)
        if self.reload_buffer < 1:
            msg = f"reload_buffer must be at least 1, got {self.reload_buffer}"
            raise ConfigError(msg)
        if self.template_command is not None and not self.template_command:
            object.__setattr__(self, "template_command", None)

    @property
    def content_path(self) -> Path:
        """Absolute path to content directory."""
        return self.root / self.content_dir

    @property
    def templates_path(self) -> Path:
        """Absolute path to templates directory."""
        return self.root / self.templates_dir

    @property
    def output_path(self) -> Path:
        """Absolute path to output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    @property
    def debounce_s(self) -> float:
        """Debounce interval in seconds."""
        return self.debounce_ms / 1000
