"""Shared type definitions for whisker."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from whisker.export.builder import BuildResult

# Mode of operation
type WhiskerMode = Literal["build", "serve"]

# What kind of source file changed
type ChangeCategory = Literal["content", "template"]

# Filesystem operation reported by the watcher
type ChangeKind = Literal["created", "modified", "deleted"]

# Canonical URL path of a page (e.g. "/2024/03/01/hello/")
type PageURL = str

# End-to-end build function used by rebuilds
type SiteBuildFunc = Callable[..., BuildResult]
