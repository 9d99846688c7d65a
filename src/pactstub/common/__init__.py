"""
PactStub Common Utilities

Shared utilities and helpers used across PactStub modules.
"""

from .errors import PactStubError, InvalidContract, FetchError, PortUnavailable
from .utils import safe_json_parse, decode_body, normalize_headers, normalize_query, query_from_pairs
from .url_utils import PathMatcher
from .logging_utils import create_stub_logger, resolve_level

__all__ = [
    'PactStubError',
    'InvalidContract',
    'FetchError',
    'PortUnavailable',
    'safe_json_parse',
    'decode_body',
    'normalize_headers',
    'normalize_query',
    'query_from_pairs',
    'PathMatcher',
    'create_stub_logger',
    'resolve_level',
]
