"""Export layer — static output generation.

Renders posts and the index into the output tree, with SEO meta tags,
and provides the live reload client used in serve mode.
"""

from whisker.export.builder import BuildResult, BuiltFile, SiteBuilder, build_site

__all__ = ["BuildResult", "BuiltFile", "SiteBuilder", "build_site"]
