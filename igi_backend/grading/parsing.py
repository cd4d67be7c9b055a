"""Helpers for pulling structured scores out of free-form model text."""
import json
import re
from typing import Any, Dict, Optional

from igi_backend.grading.errors import GeminiResponseError

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the span from the first '{' to the last '}' after removing markdown fences."""
    cleaned = strip_code_fences(text)
    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first == -1 or last == -1 or last < first:
        raise GeminiResponseError("No JSON object found in response")
    try:
        parsed = json.loads(cleaned[first:last + 1])
    except json.JSONDecodeError as e:
        raise GeminiResponseError(f"Invalid JSON in response: {e}") from e
    if not isinstance(parsed, dict):
        raise GeminiResponseError("Response JSON is not an object")
    return parsed


def clamp(value: Any, low: float, high: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return low
    if number != number:  # NaN
        return low
    return max(low, min(high, number))


def coerce_int_score(value: Any, low: int = 0, high: int = 10) -> int:
    if isinstance(value, str):
        match = re.search(r"-?\d+", value)
        if not match:
            return low
        value = match.group(0)
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return low
    return max(low, min(high, number))


def first_integer(text: str) -> Optional[int]:
    match = re.search(r"\d+", text)
    return int(match.group(0)) if match else None
