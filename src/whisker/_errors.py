"""Whisker error hierarchy.

All whisker-specific errors inherit from WhiskerError for easy catching.
"""


class WhiskerError(Exception):
    """Base error for all whisker operations."""


class ConfigError(WhiskerError):
    """Invalid or missing configuration."""


class ContentError(WhiskerError):
    """A single source document could not be turned into a page."""


class BuildError(WhiskerError):
    """The output tree could not be cleared, rendered, or written."""


class WatchError(WhiskerError):
    """The filesystem watcher reported a failure."""


class TemplateCommandError(WhiskerError):
    """The template regeneration command failed or could not be launched.

    Attributes:
        returncode: Exit status of the command, or None if it never ran.
        output: Combined stdout/stderr captured from the command.

    """

    def __init__(self, message: str, *, returncode: int | None = None, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output
