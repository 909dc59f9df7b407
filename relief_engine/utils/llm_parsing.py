"""Utilities for parsing JSON from LLM responses."""

import json
from typing import Any, List


def parse_llm_json(text: str) -> Any:
    """
    Parse JSON from an LLM response, stripping markdown code fences if present.

    Handles these common LLM response formats:
      - Raw JSON
      - JSON wrapped in ```json ... ```
      - JSON wrapped in ``` ... ```

    Args:
        text: Raw LLM response text

    Returns:
        Parsed JSON value (usually a dict, sometimes a list)

    Raises:
        json.JSONDecodeError: If the extracted text is not valid JSON
    """
    stripped = (text or "").strip()

    if "```json" in stripped:
        json_start = stripped.find("```json") + 7
        json_end = stripped.find("```", json_start)
        stripped = stripped[json_start:json_end].strip()
    elif "```" in stripped:
        json_start = stripped.find("```") + 3
        json_end = stripped.find("```", json_start)
        stripped = stripped[json_start:json_end].strip()

    return json.loads(stripped)


def extract_list(payload: Any, key: str) -> List[Any]:
    """
    Pull a list out of a parsed response.

    JSON-mode models must answer with an object, so lists usually arrive
    wrapped as ``{key: [...]}``; a bare list is accepted as well.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        value = payload.get(key)
        if isinstance(value, list):
            return value
    raise ValueError(f"Expected a JSON list or an object with a '{key}' list")
