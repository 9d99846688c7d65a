"""
PactStub URL Utilities

Path normalization and placeholder-aware path matching.
"""

import re
from typing import List
from urllib.parse import unquote


# {id}, :id and * each stand for exactly one non-empty segment
PLACEHOLDER_PATTERN = re.compile(r'^(\{[^/{}]+\}|:[A-Za-z_][A-Za-z0-9_]*|\*)$')


class PathMatcher:
    """Handles request path comparison against recorded paths."""

    @staticmethod
    def split_segments(path: str) -> List[str]:
        """
        Split a path into its non-empty, percent-decoded segments.

        Args:
            path: URL path such as "/widgets/1/"

        Returns:
            List of segments, e.g. ["widgets", "1"]
        """
        return [unquote(segment) for segment in path.split('/') if segment]

    @staticmethod
    def is_placeholder(segment: str) -> bool:
        """Check whether a recorded path segment is a placeholder."""
        return bool(PLACEHOLDER_PATTERN.match(segment))

    @staticmethod
    def has_placeholders(pattern: str) -> bool:
        """Check whether a recorded path contains any placeholder segment."""
        return any(PathMatcher.is_placeholder(s) for s in pattern.split('/') if s)

    @staticmethod
    def normalize_path(path: str) -> str:
        """Normalize a path for exact comparison (leading slash, no trailing slash)."""
        if not path:
            return '/'
        normalized = '/' + path.strip('/')
        return normalized

    @staticmethod
    def paths_match(pattern: str, path: str) -> bool:
        """
        Compare a recorded path (possibly containing placeholders) to a live path.

        Exact comparison is attempted first. When the recorded path contains
        placeholder segments, both paths are compared segment by segment and
        each placeholder accepts any non-empty value.

        Args:
            pattern: Path recorded in the contract
            path: Path of the incoming request

        Returns:
            True if the paths match
        """
        if PathMatcher.normalize_path(pattern) == PathMatcher.normalize_path(path):
            return True

        if not PathMatcher.has_placeholders(pattern):
            return False

        pattern_segments = [s for s in pattern.split('/') if s]
        path_segments = PathMatcher.split_segments(path)

        if len(pattern_segments) != len(path_segments):
            return False

        for expected, actual in zip(pattern_segments, path_segments):
            if PathMatcher.is_placeholder(expected):
                continue
            if unquote(expected) != actual:
                return False

        return True
