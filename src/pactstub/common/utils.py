"""
PactStub Common Utilities

JSON and header helpers shared by the contract model, the matcher and the
HTTP layer.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qs


def safe_json_parse(json_string: Union[str, bytes, None], default: Any = None) -> Any:
    """
    Safely parse JSON string with error handling.

    Args:
        json_string: JSON string (or UTF-8 bytes) to parse
        default: Default value to return if parsing fails

    Returns:
        Parsed JSON object, or default if parsing fails

    Example:
        body = safe_json_parse(request.body, default=None)
    """
    if not json_string:
        return default

    try:
        if isinstance(json_string, bytes):
            json_string = json_string.decode('utf-8')
        return json.loads(json_string)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError, ValueError):
        return default


def decode_body(body: Optional[bytes]) -> str:
    """Decode a raw request body as UTF-8 text (empty string when absent)."""
    if not body:
        return ''
    return body.decode('utf-8', errors='replace')


def normalize_headers(headers: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """
    Lower-case header names and stringify values.

    Pact files may record multi-valued headers as lists; those are joined
    with ", " the way they appear on the wire.
    """
    if not headers or not isinstance(headers, Mapping):
        return {}

    normalized = {}
    for name, value in headers.items():
        if isinstance(value, (list, tuple)):
            value = ', '.join(str(v) for v in value)
        normalized[str(name).lower()] = str(value).strip()
    return normalized


def normalize_query(query: Any) -> Dict[str, Tuple[str, ...]]:
    """
    Convert a query description into a mapping of name to values.

    Accepts:
    - a raw query string ("a=1&b=2&b=3"), as written by pact v2 files
    - a mapping of name to a string or a list of strings, as in pact v3

    Args:
        query: Query string, mapping, or None

    Returns:
        Dict mapping each parameter name to a tuple of its values
    """
    if not query:
        return {}

    if isinstance(query, str):
        parsed = parse_qs(query.lstrip('?'), keep_blank_values=True)
        return {name: tuple(values) for name, values in parsed.items()}

    if isinstance(query, Mapping):
        result = {}
        for name, values in query.items():
            if isinstance(values, (list, tuple)):
                result[str(name)] = tuple(str(v) for v in values)
            elif values is None:
                result[str(name)] = ('',)
            else:
                result[str(name)] = (str(values),)
        return result

    return {}


def query_from_pairs(pairs: List[Tuple[str, str]]) -> Dict[str, Tuple[str, ...]]:
    """Group (name, value) pairs from a live request into a query mapping."""
    grouped: Dict[str, List[str]] = {}
    for name, value in pairs:
        grouped.setdefault(name, []).append(value)
    return {name: tuple(values) for name, values in grouped.items()}
