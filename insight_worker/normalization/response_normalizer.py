"""Extracts a well-formed result object from free-form model output."""

import copy
import json
import re
from typing import Any

from insight_worker.logging.logger import Log

_FENCED_OBJECT = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.IGNORECASE | re.DOTALL)


def extract_json_candidate(raw_text: str) -> str | None:
    """Return the substring most likely to hold the JSON object, if any.

    The first fenced block that parses as a JSON object wins; otherwise the
    span from the first ``{`` to the last ``}``.
    """
    for match in _FENCED_OBJECT.finditer(raw_text):
        block = match.group(1)
        try:
            if isinstance(json.loads(block), dict):
                return block
        except ValueError:
            continue
    first_brace = raw_text.find("{")
    last_brace = raw_text.rfind("}")
    if first_brace == -1 or last_brace <= first_brace:
        return None
    return raw_text[first_brace : last_brace + 1]


def normalize_response(raw_text: str | None, default_shape: dict[str, Any]) -> dict[str, Any]:
    """Merge the JSON object found in ``raw_text`` over ``default_shape``.

    Missing fields keep their defaults, extra fields are dropped and values of
    the wrong type fall back to the default. Never raises: when nothing can be
    parsed a copy of ``default_shape`` is returned.
    """
    try:
        parsed = _parse(raw_text or "")
    except Exception as exc:  # noqa: BLE001
        Log.warning(f"Unparseable AI response, using defaults ({exc}). Raw response: {raw_text!r}")
        return copy.deepcopy(default_shape)
    return _merge(default_shape, parsed)


def _parse(raw_text: str) -> dict[str, Any]:
    candidate = extract_json_candidate(raw_text)
    if candidate is None:
        raise ValueError("no JSON object found")
    parsed = json.loads(candidate)
    if not isinstance(parsed, dict):
        raise ValueError("JSON response must be an object")
    return parsed


def _merge(default: dict[str, Any], parsed: dict[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for key, default_value in default.items():
        value = parsed.get(key)
        if isinstance(default_value, dict) and isinstance(value, dict):
            merged[key] = _merge(default_value, value)
        elif _matches_type(default_value, value):
            merged[key] = value
        else:
            merged[key] = copy.deepcopy(default_value)
    return merged


def _matches_type(default_value: Any, value: Any) -> bool:
    if value is None:
        return False
    if default_value is None:
        return True
    if isinstance(default_value, bool):
        return isinstance(value, bool)
    if isinstance(default_value, (int, float)):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, type(default_value))
