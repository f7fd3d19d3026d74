"""Configuration loader for the report composer.

Reads ``report_composer/config/defaults.yaml`` (or the file named by
``--config`` / ``RC_CONFIG``) and layers overrides on top, in this order:

1. short environment aliases (``REPORT_ID_COLUMN=row_id``)
2. prefixed environment variables (``RC__LAYOUT__MARGIN=15``)
3. command line ``--set layout.margin=15`` flags

Override values are parsed as YAML scalars and then cast to the type of the
default they replace, so ``RC__STATISTICS__MAX_COLUMNS=5`` stays an int and
``--set layout.margin=15`` becomes ``15.0``.

>>> from report_composer.core.config import get_config
>>> cfg = get_config(cli_args=["--set", "statistics.max_columns=5"])
"""

from __future__ import annotations

import argparse
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Sequence

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "defaults.yaml"
ENV_PREFIX = "RC__"
CONFIG_PATH_ENV_VARS: tuple[str, ...] = ("RC_CONFIG", "REPORT_COMPOSER_CONFIG")

ENV_ALIASES: dict[str, str] = {
    "REPORT_ID_COLUMN": "statistics.id_column",
}

_TRUTHY = {"1", "true", "yes", "on"}

_cache: tuple[tuple[Any, ...], dict[str, Any]] | None = None


def _cli_options(cli_args: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", dest="config_path")
    parser.add_argument("--set", dest="set_values", action="append", default=[])
    known, _ = parser.parse_known_args(list(cli_args))
    return known


def _config_path(env: Mapping[str, str], cli_path: str | None) -> Path:
    candidates = [cli_path] + [env.get(name) for name in CONFIG_PATH_ENV_VARS]
    chosen = next((c for c in candidates if c), None)
    return Path(chosen).expanduser() if chosen else DEFAULT_CONFIG_PATH


def _override_pairs(env: Mapping[str, str],
                    set_values: Sequence[str]) -> list[tuple[str, str]]:
    """Collect ``(dotted.path, raw value)`` pairs in application order."""
    pairs = [(path, env[alias]) for alias, path in ENV_ALIASES.items()
             if str(env.get(alias, "")).strip()]
    pairs += [(key[len(ENV_PREFIX):].replace("__", "."), val)
              for key, val in env.items()
              if key.upper().startswith(ENV_PREFIX) and str(val).strip()]

    for item in set_values:
        path, sep, raw = item.partition("=")
        if not sep or not path.strip():
            raise ValueError(f"Invalid --set override '{item}'; expected path=value")
        pairs.append((path.strip(), raw))
    return pairs


def _cast(raw: str, current: Any) -> Any:
    """Parse ``raw`` as a YAML scalar and cast it to the type of ``current``."""
    try:
        value = yaml.safe_load(raw) if raw.strip() else None
    except yaml.YAMLError:
        value = raw
    if current is None or value is None:
        return value

    try:
        if isinstance(current, bool):
            return str(value).strip().lower() in _TRUTHY
        if isinstance(current, int):
            return int(float(value))
        if isinstance(current, float):
            return float(value)
        if isinstance(current, str):
            return str(value)
    except (TypeError, ValueError):
        pass
    return value


def _apply(cfg: MutableMapping[str, Any], dotted: str, raw: str) -> None:
    tokens = [tok for tok in dotted.split(".") if tok]
    if not tokens:
        raise ValueError("Empty config path in override")

    node = cfg
    for position, token in enumerate(tokens):
        # keys match case-insensitively so RC__LAYOUT__MARGIN reaches layout.margin
        key = next((k for k in node if str(k).lower() == token.lower()), token)
        if position == len(tokens) - 1:
            node[key] = _cast(raw, node.get(key))
        else:
            if not isinstance(node.get(key), MutableMapping):
                node[key] = {}
            node = node[key]


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise TypeError(f"Root of config must be a mapping, got {type(data)!r}")
    return data


def get_config(*, cli_args: Sequence[str] = (),
               env: Mapping[str, str] | None = None,
               reload: bool = False) -> dict[str, Any]:
    """Return the effective configuration as a fresh dictionary.

    Args:
        cli_args: arguments scanned for ``--config`` and ``--set``; anything
            else is ignored.
        env: environment variables.  Defaults to ``os.environ``.
        reload: re-read the YAML even when nothing changed since the last call.

    Raises:
        ValueError: on a ``--set`` flag without ``path=value``.
        FileNotFoundError: if the config file does not exist.
    """
    global _cache

    env = os.environ if env is None else env
    options = _cli_options(cli_args)
    path = _config_path(env, options.config_path)
    pairs = _override_pairs(env, options.set_values)

    signature = (str(path.resolve()), tuple((p.lower(), str(v)) for p, v in pairs))
    if reload or _cache is None or _cache[0] != signature:
        cfg = _read_yaml(path)
        for dotted, raw in pairs:
            _apply(cfg, dotted, str(raw))
        _cache = (signature, cfg)

    return deepcopy(_cache[1])


__all__ = ["get_config"]
