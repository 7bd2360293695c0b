"""
Shared configuration loader for mpris-ctrl.

Loads a single JSON config file.  Search order:
  1. $MPRIS_CTRL_CONFIG                              (explicit override)
  2. $XDG_CONFIG_HOME/mpris-ctrl/config.json         (~/.config when unset)
  3. config.json                                     (CWD — handy for local dev)

A missing file is not an error: every key has a default.

Usage:
    from .config import cfg

    interval  = cfg("poll", "interval", default=0.075)
    attempts  = cfg("poll", "attempts", default=20)
    cache_dir = cfg("cache_dir")
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

PROGRAM_NAME = "mpris-ctrl"

_config: dict | None = None

# (section, key) -> whether the value must be a whole number; all must be > 0
_NUMERIC_KEYS = {
    ("poll", "interval"): False,
    ("poll", "attempts"): True,
    ("display", "title_max"): True,
}


def _search_paths() -> list[str]:
    paths = []
    override = os.environ.get("MPRIS_CTRL_CONFIG")
    if override:
        paths.append(override)
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(
        os.path.expanduser("~"), ".config")
    paths.append(os.path.join(config_home, PROGRAM_NAME, "config.json"))
    paths.append("config.json")
    return paths


def _validate(config: dict, path: str) -> None:
    """Warn about suspicious config values and drop them so defaults apply."""
    for (section, key), whole in sorted(_NUMERIC_KEYS.items()):
        values = config.get(section)
        if not isinstance(values, dict) or key not in values:
            continue
        val = values[key]
        types = (int,) if whole else (int, float)
        if isinstance(val, bool) or not isinstance(val, types) or val <= 0:
            kind = "an integer >= 1" if whole else "a positive number"
            logger.warning("Config %s: %s.%s must be %s, got %r — using default",
                           path, section, key, kind, val)
            del values[key]
    level = config.get("log_level")
    if level is not None and not isinstance(logging.getLevelName(str(level).upper()), int):
        logger.warning("Config %s: unknown log_level '%s'", path, level)
        del config["log_level"]


def load_config() -> dict:
    """Load config from the first JSON file found. Cached after first call."""
    global _config
    if _config is not None:
        return _config

    for path in _search_paths():
        try:
            with open(path) as f:
                loaded = json.load(f)
        except FileNotFoundError:
            continue
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", path, e)
            continue
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            continue
        if not isinstance(loaded, dict):
            logger.error("Config %s: top level must be an object", path)
            continue
        _config = loaded
        logger.debug("Config loaded from %s", path)
        _validate(_config, path)
        return _config

    _config = {}
    return _config


def cfg(section: str, key: str | None = None, *, default=None):
    """Read a config value; invalid poll/display numbers were already dropped,
    so callers get either a validated value or their own *default*.

    cfg("cache_dir")                     → config["cache_dir"]
    cfg("poll", "attempts")              → config["poll"]["attempts"]
    cfg("display", "title_max", default=40)  → config["display"]["title_max"] or 40
    """
    config = load_config()
    val = config.get(section)
    if key is None:
        return val if val is not None else default
    if isinstance(val, dict):
        return val.get(key, default)
    return default


def reload_config():
    """Drop the cached config and load it again from the first file found.

    The CLI reads config once per invocation; tests call this after
    rewriting config.json.
    """
    global _config
    _config = None
    return load_config()
