"""JSON extraction from raw LLM responses.

Contains:
- extract_json: Find the first well-formed JSON object or array in a text
- parse_json_response: Extract JSON, requiring a particular top-level type
"""

import json
from typing import Any, Optional

from fission.llm.exceptions import JSONParseError


_OPENERS = {"{": "}", "[": "]"}


def _matching_end(text: str, start: int) -> Optional[int]:
    """Index of the bracket closing the one at `start`, skipping strings."""
    stack = [_OPENERS[text[start]]]
    in_string = False
    escaped = False
    for i in range(start + 1, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in ("}", "]"):
            if char != stack[-1]:
                return None
            stack.pop()
            if not stack:
                return i
    return None


def extract_json(raw_response: str, opener: Optional[str] = None) -> Any:
    """Find the first well-formed JSON object or array in a text.

    Markdown fences and commentary around the JSON are ignored.

    Args:
        raw_response: The raw text response from the LLM.
        opener: Restrict the search to "{" (objects) or "[" (arrays).

    Returns:
        The parsed JSON value.

    Raises:
        JSONParseError: If no well-formed JSON value is found.
    """
    openers = (opener,) if opener else tuple(_OPENERS)
    for start, char in enumerate(raw_response):
        if char not in openers:
            continue
        end = _matching_end(raw_response, start)
        if end is None:
            continue
        try:
            return json.loads(raw_response[start:end + 1])
        except json.JSONDecodeError:
            continue

    preview = raw_response[:500]
    raise JSONParseError(
        f"Failed to find JSON in LLM response.\n"
        f"Raw response:\n{preview}"
    )


def parse_json_response(raw_response: str) -> dict:
    """Parse the LLM response as a JSON object.

    Args:
        raw_response: The raw text response from the LLM.

    Returns:
        The parsed JSON as a dictionary.

    Raises:
        JSONParseError: If parsing fails.
    """
    return extract_json(raw_response, opener="{")
