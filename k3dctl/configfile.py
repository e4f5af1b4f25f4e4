"""Reading cluster configuration files with environment variable expansion."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SPECIAL_VARS = frozenset("*#$@!?-0123456789")


class ConfigFileError(Exception):
    """Raised when a config file cannot be read or parsed."""


def _is_alnum(char: str) -> bool:
    return char == "_" or ("0" <= char <= "9") or ("a" <= char <= "z") or ("A" <= char <= "Z")


def _shell_name(rest: str) -> tuple[str, int]:
    """Return the variable name at the start of ``rest`` and how many characters it spans."""
    if rest[0] == "{":
        if len(rest) > 2 and rest[1] in _SPECIAL_VARS and rest[2] == "}":
            return rest[1], 3
        closing = rest.find("}", 1)
        if closing == -1:
            return "", 1
        if closing == 1:
            return "", 2
        return rest[1:closing], closing + 1
    if rest[0] in _SPECIAL_VARS:
        return rest[0], 1
    length = 0
    while length < len(rest) and _is_alnum(rest[length]):
        length += 1
    return rest[:length], length


def expand_env(text: str, env: Mapping[str, str] | None = None) -> str:
    """Replace ``$name`` and ``${name}`` with values from ``env``; unknown names become empty."""
    values = os.environ if env is None else env
    out: list[str] = []
    position = 0
    start = 0
    while position < len(text):
        if text[position] == "$" and position + 1 < len(text):
            out.append(text[start:position])
            name, width = _shell_name(text[position + 1 :])
            if not name and width == 0:
                out.append("$")
            elif name:
                out.append(values.get(name, ""))
            position += width
            start = position + 1
        position += 1
    out.append(text[start:])
    return "".join(out)


def load_config_file(config_file: str | os.PathLike, env: Mapping[str, str] | None = None) -> dict:
    """Read a YAML config file, expanding environment variables first."""
    path = Path(config_file)
    try:
        original = path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigFileError(f"Failed to read config file {path}: {err}") from err

    expanded = expand_env(original, env)
    try:
        data = yaml.safe_load(expanded)
    except yaml.YAMLError as err:
        raise ConfigFileError(f"Failed to read config file {path}: {err}") from err

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigFileError(f"Failed to read config file {path}: expected a mapping at top level")

    logger.info(
        "Using config file %s (%s#%s)",
        path,
        str(data.get("apiVersion", "")).lower(),
        str(data.get("kind", "")).lower(),
    )
    return data