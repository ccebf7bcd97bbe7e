"""
Best-effort JSON decoding of LLM output.

Models wrap JSON in markdown fences, surround it with prose, or leak control
characters into it. The decoder tries progressively looser readings of the
response and keeps the first one that parses.
"""

import copy
import json
import re
from typing import Any, Iterator, Optional


_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')
_FENCE_OPEN = re.compile(r'^```[\w-]*\n?')
_FENCE_CLOSE = re.compile(r'\n?```$')
_OBJECT = re.compile(r'\{[\s\S]*\}')
_ARRAY = re.compile(r'\[[\s\S]*\]')


def _candidates(text: str) -> Iterator[str]:
    yield text
    if text.startswith("```"):
        yield _FENCE_CLOSE.sub('', _FENCE_OPEN.sub('', text).strip())
    match = _OBJECT.search(text)
    if match:
        yield match.group()
    match = _ARRAY.search(text)
    if match:
        yield match.group()


def parse_llm_json(response: str) -> Any:
    """
    Parse JSON out of an LLM response.

    Args:
        response: Raw LLM response text

    Returns:
        Parsed JSON object or array

    Raises:
        ValueError: If nothing parses

    Examples:
        >>> parse_llm_json('```json\\n{"hookStyle": "question"}\\n```')
        {'hookStyle': 'question'}

        >>> parse_llm_json('Sentences: ["One.", "Two."]')
        ['One.', 'Two.']
    """
    cleaned = _CONTROL_CHARS.sub('', response or '').strip()

    if not cleaned:
        raise ValueError("Empty response")
    for candidate in _candidates(cleaned):
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue

    raise ValueError(f"Could not parse JSON from response: {response[:200]}...")


def decode_structured(response: Optional[str], expected: type, default: Any) -> Any:
    """
    Structured decode that never raises.

    Args:
        response: Raw LLM response text (may be None)
        expected: Required top-level type, ``dict`` or ``list``
        default: Returned as a deep copy when decoding fails or yields the
            wrong type

    Returns:
        The parsed value, or a copy of ``default``
    """
    try:
        result = parse_llm_json(response or "")
    except ValueError:
        return copy.deepcopy(default)
    if not isinstance(result, expected):
        return copy.deepcopy(default)
    return result
