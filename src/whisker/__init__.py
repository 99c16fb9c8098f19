"""Whisker — a static blog builder with a live-reloading dev server.

Markdown posts with YAML frontmatter go in, a plain static site comes
out.  In serve mode the site is rebuilt whenever a post or template
changes and every open browser tab reloads itself.

Quick start::

    import whisker

    whisker.build("my-blog/")     # One-shot build into public/
    whisker.serve("my-blog/")     # Build, watch, serve on :8080

Built on the Bengal ecosystem:

    pounce      ASGI server       (serves the app)
    chirp       Web framework     (static files, SSE)
    kida        Template engine   (renders pages)
    patitas     Markdown parser   (parses posts)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0.dev0"
__all__ = [
    "WhiskerConfig",
    "__version__",
    "build",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import whisker`` fast while providing a clean top-level API.
    """
    if name == "WhiskerConfig":
        from whisker.config import WhiskerConfig

        return WhiskerConfig

    if name == "build":
        from whisker.app import build

        return build

    if name == "serve":
        from whisker.app import serve

        return serve

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
