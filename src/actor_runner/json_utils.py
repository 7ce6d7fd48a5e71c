"""JSON parsing helpers."""

from __future__ import annotations

import json
from typing import Any


def extract_first_json_object(text: str) -> str:
    """
    Extract the first top-level JSON object from text.
    This is a fallback for models that wrap JSON in extra text.
    """
    start = text.find("{")
    if start == -1:
        raise ValueError("No JSON object found in model output.")

    depth = 0
    in_string = False
    escape = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == "\"":
                in_string = False
        else:
            if ch == "\"":
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]

    raise ValueError("Unbalanced JSON object in model output.")


def parse_json_object(text: str) -> dict[str, Any]:
    """
    Parse text as a JSON object, falling back to the first embedded object.
    Raises ValueError when no JSON object can be recovered.
    """
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = json.loads(extract_first_json_object(text))
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}.")
    return parsed
