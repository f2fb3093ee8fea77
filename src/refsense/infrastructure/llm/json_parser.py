from __future__ import annotations
import json
from typing import Any, Dict, Optional
from .exceptions import MalformedJsonError


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_json_strict(text: str) -> Dict[str, Any]:
    """Decode a JSON object. NaN/Infinity are rejected, as strict JSON has no such values."""
    text = (text or "").strip()
    try:
        obj = json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise MalformedJsonError(f"Failed to parse JSON: {e}") from e
    if not isinstance(obj, dict):
        raise MalformedJsonError(f"Expected a JSON object, got {type(obj).__name__}.")
    return obj


def extract_json_object_loose(text: str) -> Optional[str]:
    """Return the outermost brace span (first '{' through last '}'), or None."""
    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]
