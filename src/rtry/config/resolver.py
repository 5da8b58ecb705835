"""
Environment substitution for rtry config values.

Placeholders:

- ``${VAR}``: value of VAR, left untouched when VAR is unset
- ``${VAR:-default}``: value of VAR, or ``default`` when unset or empty
- ``${VAR:?message}``: value of VAR, ConfigurationError with ``message`` otherwise
- ``{env}``: the current environment name

A value made of a single placeholder that resolves to an integer becomes an
``int``, so ``max_attempts: ${RTRY_MAX_ATTEMPTS}`` validates like a literal.
"""

import os
import re
from typing import Any

from rtry.exceptions import ConfigurationError

_PLACEHOLDER = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:-|:\?)(?P<arg>[^}]*))?\}")
_INTEGER = re.compile(r"[+-]?[0-9]+")


def resolve_config(config_data: dict[str, Any], env: str = "dev") -> dict[str, Any]:
    """
    Resolve placeholders throughout a config mapping.

    Args:
        config_data: Configuration dictionary
        env: Current environment name

    Returns:
        Resolved configuration

    Raises:
        ConfigurationError: A ``${VAR:?message}`` variable is unset
    """
    return _resolve_value(config_data, env, "")


def _resolve_value(value: Any, env: str, path: str) -> Any:
    if isinstance(value, dict):
        return {k: _resolve_value(v, env, f"{path}.{k}" if path else str(k)) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_value(item, env, f"{path}[{i}]") for i, item in enumerate(value)]
    if isinstance(value, str):
        return _resolve_string(value, env, path)
    return value


def _resolve_string(value: str, env: str, path: str) -> Any:
    def substitute(match: re.Match) -> str:
        name, op, arg = match.group("name", "op", "arg")
        current = os.getenv(name)
        if op == ":-":
            return current if current else arg
        if op == ":?":
            if not current:
                raise ConfigurationError(f"{path}: {arg or f'environment variable {name} is not set'}")
            return current
        return current if current is not None else match.group(0)

    result = _PLACEHOLDER.sub(substitute, value).replace("{env}", env)

    if result != value and _PLACEHOLDER.fullmatch(value) and _INTEGER.fullmatch(result):
        return int(result)
    return result
