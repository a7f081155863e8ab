"""Load JrenderConfig from jrender.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from jrender._errors import ConfigError
from jrender.config import JrenderConfig

_KNOWN_KEYS = frozenset({
    "evaluator", "evaluator_args", "converter", "converter_args", "vcs",
    "extensions", "jpath", "separator", "checkout_dir", "verbose",
})

_TUPLE_KEYS = ("evaluator_args", "converter_args", "extensions")


def load_config(root: Path, **overrides: object) -> JrenderConfig:
    """Load JrenderConfig from root, optionally merging jrender.yaml.

    Looks for jrender.yaml, jrender.yml, or jrender.toml in root. If found,
    loads and merges with overrides. Overrides take precedence; ``None``
    overrides are ignored so unset CLI flags keep the file value.

    Raises:
        ConfigError: If a config file exists but cannot be parsed.

    """
    file_config = _read_jrender_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    return JrenderConfig(root=root, **_normalize(merged))


def _read_jrender_config(root: Path) -> dict[str, object]:
    """Read jrender config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("jrender.yaml", "jrender.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "jrender.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Cannot read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path.name} must contain a mapping"
        raise ConfigError(msg)
    return _flatten_jrender_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Cannot read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_jrender_section(data)


def _flatten_jrender_section(data: dict[str, object]) -> dict[str, object]:
    """Extract jrender.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("jrender")
    if isinstance(section, dict):
        result.update((k, v) for k, v in section.items() if k in _KNOWN_KEYS)
    for k, v in data.items():
        if k != "jrender" and k in _KNOWN_KEYS:
            result[k] = v
    return result


def _normalize(merged: dict[str, object]) -> dict[str, object]:
    """Coerce file values (lists, strings) to the types JrenderConfig expects."""
    for key in _TUPLE_KEYS:
        value = merged.get(key)
        if isinstance(value, str):
            merged[key] = tuple(value.split())
        elif value is not None and not isinstance(value, tuple):
            merged[key] = tuple(str(v) for v in value)  # type: ignore[attr-defined]
    jpath = merged.get("jpath")
    if jpath is not None:
        if isinstance(jpath, (str, Path)):
            jpath = [jpath]
        merged["jpath"] = tuple(Path(str(p)) for p in jpath)  # type: ignore[attr-defined]
    checkout_dir = merged.get("checkout_dir")
    if checkout_dir is not None and not isinstance(checkout_dir, Path):
        merged["checkout_dir"] = Path(str(checkout_dir))
    return merged
