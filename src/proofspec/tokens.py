"""
Token Resolution

Replaces `{{path.to.value}}` placeholders in strings, or in every string of a
JSON-like value, by walking a layered token context:

    context = {"criteria": {"org": "Acme"}}
    resolve_tokens("Report for {{criteria.org}}", context)  # "Report for Acme"

Resolved values may themselves contain placeholders, so resolution is repeated
until no placeholder remains. `env.NAME` tokens are read from an injected
environment provider instead of the token context.
"""

from __future__ import annotations

import copy
import logging
import math
import os
import re
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Protocol

from proofspec.config import get_settings
from proofspec.core.constants import CONSTANTS
from proofspec.core.exceptions import InvalidTokenError, TokenRecursionError

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\{\{.*?\}\}")

# Layered scope: criteria, messages, constants, lookups, dataSource, data
TokenContext = dict[str, Any]

_EXPONENT_THRESHOLD = 10**21


class _Missing:
    """Sentinel for a token that resolved to nothing."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class EnvironmentProvider(Protocol):
    """Read-only source for `env.NAME` tokens."""

    def get(self, name: str) -> str | None: ...


class StaticEnvironment:
    """Environment provider backed by a fixed mapping."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values = dict(values or {})

    def get(self, name: str) -> str | None:
        return self._values.get(name)


class ProcessEnvironment(StaticEnvironment):
    """Snapshot of the process environment taken at construction."""

    def __init__(self) -> None:
        super().__init__(os.environ)


_default_environment: EnvironmentProvider | None = None


def get_default_environment() -> EnvironmentProvider:
    """Environment used when a caller does not inject one."""
    global _default_environment
    if _default_environment is None:
        _default_environment = ProcessEnvironment()
    return _default_environment


def set_default_environment(environment: EnvironmentProvider | None) -> None:
    """Replace (or with None, reset) the default environment provider."""
    global _default_environment
    _default_environment = environment


def init_token_context(
    criteria: Mapping[str, Any] | None,
    messages: Mapping[str, str] | None = None,
) -> TokenContext:
    """
    Build the token context for one request.

    `lookups` starts empty: fetching lookups is expensive and not every
    operation needs them. See ProofSpecComposer.run_lookups.
    """
    return {
        "messages": dict(messages or {}),
        "constants": dict(CONSTANTS),
        "criteria": dict(criteria or {}),
        "lookups": {},
    }


def resolve_tokens(
    value: Any,
    context: Mapping[str, Any],
    suppress_errors: bool = False,
    *,
    environment: EnvironmentProvider | None = None,
    max_passes: int | None = None,
) -> Any:
    """
    Replace tokens in a string, or in strings at all levels of a JSON value.

    Returns a new value and leaves the input unmodified. Tokens that resolve
    to None are replaced with an empty string.

    Args:
        value: String or JSON-like value (dicts, lists, scalars).
        context: Scopes to resolve token paths against.
        suppress_errors: Leave unresolvable tokens in place instead of raising.
        environment: Provider for `env.NAME` tokens.
        max_passes: Rescan limit; defaults to settings.tokens.max_passes.

    Raises:
        InvalidTokenError: A token could not be resolved and errors are not
            suppressed, or a token is empty.
        TokenRecursionError: Placeholders were still being produced after
            `max_passes` passes.
    """
    return _resolve_value(value, context, suppress_errors, "", environment, max_passes)


def resolve_tokens_with_missing_default(
    value: str,
    context: Mapping[str, Any],
    suppress_errors: bool = False,
    *,
    environment: EnvironmentProvider | None = None,
    max_passes: int | None = None,
) -> Any:
    """
    Like resolve_tokens for a single string, but a token that resolves to
    None turns the whole result into MISSING.
    """
    return _resolve_string(value, context, suppress_errors, MISSING, environment, max_passes)


def resolve_params(
    params: Mapping[str, Any] | None,
    context: Mapping[str, Any],
    *,
    environment: EnvironmentProvider | None = None,
) -> dict[str, Any] | None:
    """Return a copy of data set params with every string value resolved."""
    if params is None:
        return None
    return {
        key: resolve_tokens(value, context, environment=environment)
        if isinstance(value, str)
        else value
        for key, value in params.items()
    }


def contains_tokens(value: str) -> bool:
    """True if the string holds at least one placeholder."""
    return TOKEN_PATTERN.search(value) is not None


def _resolve_value(
    value: Any,
    context: Mapping[str, Any],
    suppress_errors: bool,
    missing_default: Any,
    environment: EnvironmentProvider | None,
    max_passes: int | None,
) -> Any:
    if isinstance(value, str):
        return _resolve_string(
            value, context, suppress_errors, missing_default, environment, max_passes
        )
    out = copy.deepcopy(value)
    _resolve_in_place(out, context, suppress_errors, missing_default, environment, max_passes)
    return out


def _resolve_in_place(
    value: Any,
    context: Mapping[str, Any],
    suppress_errors: bool,
    missing_default: Any,
    environment: EnvironmentProvider | None,
    max_passes: int | None,
) -> None:
    if isinstance(value, dict):
        keys: Any = list(value.keys())
    elif isinstance(value, list):
        keys = range(len(value))
    else:
        return

    for key in keys:
        item = value[key]
        if isinstance(item, str):
            value[key] = _resolve_string(
                item, context, suppress_errors, missing_default, environment, max_passes
            )
        elif isinstance(item, (dict, list)):
            _resolve_in_place(
                item, context, suppress_errors, missing_default, environment, max_passes
            )


def _resolve_string(
    value: str,
    context: Mapping[str, Any],
    suppress_errors: bool,
    missing_default: Any,
    environment: EnvironmentProvider | None,
    max_passes: int | None,
) -> Any:
    env = environment or get_default_environment()
    limit = max_passes or get_settings().tokens.max_passes

    output: Any = value
    tokens = TOKEN_PATTERN.findall(output)
    found_error = False
    passes = 0

    while tokens and not found_error:
        passes += 1
        if passes > limit:
            raise TokenRecursionError(tokens[0], limit)

        for token in tokens:
            variable = token[2:-2].strip()
            if not variable:
                raise InvalidTokenError(token)

            # Once a token fails, the rest of this pass is left as-is
            if found_error:
                continue

            ok, resolved = _lookup(variable, context, env)
            if not ok:
                found_error = True
                if suppress_errors:
                    logger.debug(f"[Tokens] Leaving unresolved token {token}")
                    continue
                raise InvalidTokenError(token)

            if resolved is None:
                if missing_default is MISSING:
                    return MISSING
                output = output.replace(token, missing_default, 1)
            else:
                output = output.replace(token, _to_string(resolved), 1)

        # Resolved values may have introduced more tokens
        tokens = TOKEN_PATTERN.findall(output)

    return output


def _lookup(
    variable: str, context: Mapping[str, Any], environment: EnvironmentProvider
) -> tuple[bool, Any]:
    """Return (found, value) for a dotted token path."""
    parts = variable.split(".")

    if len(parts) == 2 and parts[0] == "env":
        env_value = environment.get(parts[1])
        if not env_value:
            return False, None
        return True, env_value

    current: Any = context
    for part in parts:
        if not isinstance(current, Mapping) or part not in current:
            return False, None
        current = current[part]

    # Objects cannot be embedded in a string
    if isinstance(current, (Mapping, list, tuple, set, datetime, date, time)):
        return False, None
    return True, current


def _to_string(value: Any) -> str:
    """Render a scalar the way a JSON consumer would."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return number_to_string(value)
    return str(value)


def number_to_string(value: int | float) -> str:
    """
    Render a number with the shortest round-trip digits, as JSON consumers do.

    Plain notation is used from 1e-6 up to (not including) 1e21 and exponent
    notation outside it, e.g. 1e16 -> "10000000000000000", 0.00001 -> "0.00001",
    1e21 -> "1e+21", 1.5e-7 -> "1.5e-7".
    """
    if isinstance(value, int):
        if abs(value) < _EXPONENT_THRESHOLD:
            return str(value)
        value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < _EXPONENT_THRESHOLD:
        return str(int(value))

    text = repr(value)
    if 1e-6 <= abs(value) < _EXPONENT_THRESHOLD:
        return format(Decimal(text), "f") if "e" in text else text

    mantissa, exponent = text.split("e")
    return f"{mantissa}e{int(exponent):+d}"
