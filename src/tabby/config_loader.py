"""Load TabbyConfig from tabby.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

from pathlib import Path

from tabby.config import TabbyConfig

_KNOWN_KEYS = (
    "static_dir", "output", "metadata", "templates_dir", "debounce_ms",
    "workers", "site_title", "site_description", "author", "base_url",
)

_PATH_KEYS = ("output", "metadata")


def load_config(root: Path, **overrides: object) -> TabbyConfig:
    """Load TabbyConfig from root, optionally merging tabby.yaml.

    Looks for tabby.yaml, tabby.yml, or tabby.toml in root. If found, loads
    and merges with overrides. Overrides take precedence; ``None`` overrides
    are ignored so unset CLI flags never mask file values.
    """
    file_config = _read_tabby_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    for key in _PATH_KEYS:
        if key in merged and not isinstance(merged[key], Path):
            merged[key] = Path(str(merged[key]))
    return TabbyConfig(root=root, **merged)


def _read_tabby_config(root: Path) -> dict[str, object]:
    """Read tabby config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("tabby.yaml", "tabby.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "tabby.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config. Returns empty dict on error."""
    import yaml

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(data, dict):
        return {}
    return _flatten_tabby_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config. Returns empty dict on error."""
    import tomllib

    try:
        data = tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return _flatten_tabby_section(data)


def _flatten_tabby_section(data: dict[str, object]) -> dict[str, object]:
    """Extract tabby.* keys into top-level config."""
    result: dict[str, object] = {}
    tabby = data.get("tabby")
    if isinstance(tabby, dict):
        for k, v in tabby.items():
            if k in _KNOWN_KEYS:
                result[k] = v
    for k, v in data.items():
        if k != "tabby" and k in _KNOWN_KEYS:
            result[k] = v
    return result
