"""Load WhiskerConfig from whisker.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path

import yaml

from whisker.config import WhiskerConfig

_CONFIG_FILES = ("whisker.yaml", "whisker.yml", "whisker.toml")

_KNOWN_KEYS = frozenset({
    "host", "port", "output", "content_dir", "templates_dir",
    "site_title", "base_url", "debounce_ms", "keepalive_s",
    "reload_buffer", "watch_retry_s", "content_extensions",
    "template_extensions", "template_command",
})

_TUPLE_KEYS = frozenset({"content_extensions", "template_extensions", "template_command"})


def load_config(root: Path, **overrides: object) -> WhiskerConfig:
    """Load WhiskerConfig from root, optionally merging whisker.yaml.

    Looks for whisker.yaml, whisker.yml, or whisker.toml in root. If found,
    loads and merges with overrides. Overrides take precedence; ``None``
    overrides are ignored so unset CLI flags never mask file values.
    """
    file_config = _read_whisker_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    if "output" in merged and not isinstance(merged["output"], Path):
        merged["output"] = Path(str(merged["output"]))
    for key in _TUPLE_KEYS & merged.keys():
        merged[key] = _as_tuple(merged[key])
    return WhiskerConfig(root=root, **merged)


def config_file(root: Path) -> Path | None:
    """Return the config file that would be read for *root*, if any."""
    for name in _CONFIG_FILES:
        path = root / name
        if path.is_file():
            return path
    return None


def _read_whisker_config(root: Path) -> dict[str, object]:
    """Read whisker config from yaml/toml if present. Returns empty dict otherwise."""
    path = config_file(root)
    if path is None:
        return {}
    if path.suffix == ".toml":
        return _parse_toml(path)
    return _parse_yaml(path)


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config. Returns empty dict on error."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        print(f"  Warning: ignoring {path.name}: {exc}", file=sys.stderr)
        return {}
    if not isinstance(data, dict):
        return {}
    return _flatten_whisker_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config. Returns empty dict on error."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        print(f"  Warning: ignoring {path.name}: {exc}", file=sys.stderr)
        return {}
    return _flatten_whisker_section(data)


def _flatten_whisker_section(data: dict[str, object]) -> dict[str, object]:
    """Extract whisker.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("whisker")
    if isinstance(section, dict):
        result.update((k, v) for k, v in section.items() if k in _KNOWN_KEYS)
    for k, v in data.items():
        if k != "whisker" and k in _KNOWN_KEYS:
            result[k] = v
    return result


def _as_tuple(value: object) -> tuple[str, ...] | None:
    """Normalise a list, tuple, or whitespace-separated string to a tuple."""
    if value is None:
        return None
    if isinstance(value, str):
        return tuple(value.split())
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return (str(value),)
