"""
Translation utility functions for flatten/unflatten, merging, chunking, and JSON extraction.
Provides capabilities for processing nested locale trees and parsing batch responses.
"""

import json
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_SEPARATOR = "."


def flatten(tree: Dict[str, Any], separator: str = DEFAULT_SEPARATOR, parent_key: str = "") -> Dict[str, Any]:
    """
    Flatten a nested tree into dotted keys.

    Args:
        tree: Nested mapping whose leaves are scalars
        separator: String joining ancestor keys
        parent_key: Key prefix of the current level

    Returns:
        Flat mapping of leaf paths to values, in traversal order

    Example:
        >>> flatten({"home": {"title": "Hello"}})
        {'home.title': 'Hello'}
    """
    result: Dict[str, Any] = {}

    for key, value in tree.items():
        new_key = f"{parent_key}{separator}{key}" if parent_key else str(key)
        if isinstance(value, dict):
            result.update(flatten(value, separator, new_key))
        else:
            result[new_key] = value

    return result


def unflatten(flat: Dict[str, Any], separator: str = DEFAULT_SEPARATOR) -> Dict[str, Any]:
    """
    Rebuild a nested tree from dotted keys.

    Args:
        flat: Flat mapping of leaf paths to values
        separator: String separating path segments

    Returns:
        Nested dictionary

    Example:
        >>> unflatten({"home.title": "Hello"})
        {'home': {'title': 'Hello'}}
    """
    result: Dict[str, Any] = {}

    for path, value in flat.items():
        keys = path.split(separator)
        node = result

        for key in keys[:-1]:
            if not isinstance(node.get(key), dict):
                # A scalar at an intermediate path is replaced by a branch
                node[key] = {}
            node = node[key]

        node[keys[-1]] = value

    return result


def merge_incremental(existing: Dict[str, Any], new: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge fresh translations into previously written ones.

    Existing values win on key collision; new values only fill keys absent
    from the existing output. Keys keep the order of ``new`` followed by
    keys that only exist in ``existing``.

    Example:
        >>> merge_incremental({"a": "1"}, {"a": "2", "b": "3"})
        {'a': '1', 'b': '3'}
    """
    merged = dict(new)
    merged.update(existing)
    return merged


def is_excluded(key: str, exclusions: Iterable[str], separator: str = DEFAULT_SEPARATOR) -> bool:
    """Check if a key equals an exclusion or is nested under one."""
    return any(key == excluded or key.startswith(f"{excluded}{separator}") for excluded in exclusions)


def filter_exclusions(
    strings: Dict[str, Any],
    exclusions: Iterable[str],
    separator: str = DEFAULT_SEPARATOR,
) -> Dict[str, Any]:
    """
    Remove excluded keys from a flat mapping.

    Args:
        strings: Flat mapping of dotted keys
        exclusions: Dotted keys to drop; a branch key drops its whole subtree

    Returns:
        Filtered mapping in the original order
    """
    exclusions = [excluded for excluded in exclusions if excluded]
    if not exclusions:
        return dict(strings)
    return {key: value for key, value in strings.items() if not is_excluded(key, exclusions, separator)}


def split_translatable(strings: Dict[str, Any]) -> Tuple[Dict[str, str], Dict[str, Any]]:
    """
    Separate entries into translatable strings and everything else.

    Args:
        strings: Flat mapping of dotted keys

    Returns:
        Tuple of (require_translation, no_translation)
    """
    require_translation: Dict[str, str] = {}
    no_translation: Dict[str, Any] = {}

    for key, value in strings.items():
        if isinstance(value, str) and value.strip():
            require_translation[key] = value
        else:
            no_translation[key] = value

    return require_translation, no_translation


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """
    Split items into consecutive chunks of ``size`` (the last may be smaller).

    Example:
        >>> chunk([1, 2, 3], 2)
        [[1, 2], [3]]
    """
    if size <= 0:
        raise ValueError("Chunk size must be positive")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def _match_brackets(text: str, opening: str, closing: str) -> Optional[str]:
    """Return the first balanced ``opening``..``closing`` span, ignoring brackets inside strings."""
    depth = 0
    start = -1
    in_string = False
    escape_next = False

    for i, char in enumerate(text):
        if escape_next:
            escape_next = False
            continue
        if char == '\\':
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == opening:
            if depth == 0:
                start = i
            depth += 1
        elif char == closing and depth:
            depth -= 1
            if depth == 0 and start >= 0:
                return text[start:i + 1]

    return None


def match_json_array(text: str) -> Optional[str]:
    """Extract the first JSON array from mixed text."""
    return _match_brackets(text, '[', ']') if text else None


def match_json_object(text: str) -> Optional[str]:
    """Extract the first JSON object from mixed text."""
    return _match_brackets(text, '{', '}') if text else None


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code block (```json ... ```)."""
    text = text.strip()
    if not text.startswith('```'):
        return text

    lines = text.split('\n')[1:]
    if lines and lines[-1].strip() == '```':
        lines = lines[:-1]
    return '\n'.join(lines).strip()


def _safe_parse(text: str, expected_type: type, matcher) -> Optional[Any]:
    if not text:
        return None

    candidates = [text.strip(), strip_code_fence(text)]
    extracted = matcher(text)
    if extracted:
        candidates.append(extracted)

    for candidate in candidates:
        try:
            result = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(result, expected_type):
            return result

    return None


def safe_parse_json_array(text: str) -> Optional[List[Any]]:
    """
    Safely parse a JSON array from potentially malformed text.

    Tries, in order: direct parse, markdown code block removal, bracket
    matching.

    Returns:
        Parsed list or None on failure
    """
    return _safe_parse(text, list, match_json_array)


def safe_parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Safely parse a JSON object from potentially malformed text."""
    return _safe_parse(text, dict, match_json_object)


def parse_translations_response(text: str) -> Optional[List[str]]:
    """
    Parse a batch translation response.

    Handles a bare JSON array and an object with a ``translations`` key whose
    items are strings or ``{"text": ...}`` objects.

    Args:
        text: Response text from the provider

    Returns:
        List of translated strings or None on failure
    """
    result = safe_parse_json_array(text)
    if result is None:
        obj = safe_parse_json_object(text)
        if obj is None or not isinstance(obj.get('translations'), list):
            return None
        result = obj['translations']

    return [item.get('text', '') if isinstance(item, dict) else item for item in result]
