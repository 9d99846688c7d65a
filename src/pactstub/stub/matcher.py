"""
PactStub Interaction Matcher

Selects the contract interaction that answers an incoming request.

Matching walks the interactions in document order and eliminates each one
that fails any of these checks, in order:
- provider-state filter
- description filter
- method (case-insensitive)
- path (exact, or per segment with placeholders)
- headers (subset, case-insensitive names)
- query parameters (subset, order-insensitive values)
- body (partial structural match, only when body matching is enabled)

The first survivor wins, so contracts can list interactions from most
specific to least specific.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..common.url_utils import PathMatcher
from ..common.utils import decode_body, normalize_headers, safe_json_parse
from .contract import ContractDocument, Interaction, RequestMatcher
from .filters import FilterState, NO_FILTERS


_MISSING = object()


@dataclass(frozen=True)
class IncomingRequest:
    """A live HTTP request, normalized for matching."""

    method: str
    path: str
    query: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b''

    @classmethod
    def create(
        cls,
        method: str,
        path: str,
        query: Optional[Mapping[str, Tuple[str, ...]]] = None,
        headers: Optional[Mapping[str, Any]] = None,
        body: Optional[bytes] = None
    ) -> 'IncomingRequest':
        """Build a request, lower-casing header names and upper-casing the method."""
        return cls(
            method=method.upper(),
            path=path or '/',
            query=dict(query or {}),
            headers=normalize_headers(headers),
            body=body or b''
        )

    @property
    def text(self) -> str:
        return decode_body(self.body)


@dataclass(frozen=True)
class BodyMatchRules:
    """Tunable body comparison rules."""

    array_order_sensitive: bool = True
    allow_type_coercion: bool = False


@dataclass
class MatchResult:
    """Result of matching a request."""

    matched: bool
    interaction: Optional[Interaction] = None
    reason: str = ""
    candidates_checked: int = 0
    rejections: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'matched': self.matched,
            'reason': self.reason,
            'candidates_checked': self.candidates_checked,
            'interaction': self.interaction.summary() if self.interaction else None
        }


class InteractionMatcher:
    """
    Matches incoming requests against the interactions of a contract.

    The matcher holds no per-request state; the same instance can serve
    concurrent requests.

    Example:
        matcher = InteractionMatcher()
        result = matcher.find_match(request, document, filters, match_body=True)

        if result.matched:
            template = result.interaction.response
    """

    def __init__(self, body_rules: Optional[BodyMatchRules] = None):
        """
        Initialize interaction matcher.

        Args:
            body_rules: Body comparison rules (strict types, ordered arrays by default)
        """
        self.body_rules = body_rules or BodyMatchRules()

    def find_match(
        self,
        request: IncomingRequest,
        document: ContractDocument,
        filters: FilterState = NO_FILTERS,
        match_body: bool = True
    ) -> MatchResult:
        """
        Find the first interaction satisfying the request and filters.

        Args:
            request: Normalized incoming request
            document: Loaded contract
            filters: Active provider-state/description filters
            match_body: Compare request bodies when True

        Returns:
            MatchResult with the winning interaction, or a no-match reason
        """
        rejections = []
        incoming_body = _MISSING

        for interaction in document.interactions:
            stage = self._rejection_stage(interaction, request, filters)

            if stage is None and match_body:
                if incoming_body is _MISSING:
                    incoming_body = self._parse_incoming_body(request)
                if not self._body_matches(interaction.request, incoming_body):
                    stage = 'body'

            if stage is None:
                return MatchResult(
                    matched=True,
                    interaction=interaction,
                    reason=f"Matched interaction '{interaction.description}'",
                    candidates_checked=len(rejections) + 1
                )

            rejections.append({
                'description': interaction.description,
                'providerState': interaction.provider_state,
                'rejected_by': stage
            })

        if not document.interactions:
            reason = "Contract has no interactions"
        else:
            reason = f"No interaction matched {request.method} {request.path}"

        return MatchResult(
            matched=False,
            reason=reason,
            candidates_checked=len(rejections),
            rejections=rejections
        )

    def _rejection_stage(
        self,
        interaction: Interaction,
        request: IncomingRequest,
        filters: FilterState
    ) -> Optional[str]:
        """Return the name of the first check the interaction fails, or None."""
        rejected_by = filters.rejection(interaction)
        if rejected_by is not None:
            return rejected_by

        expected = interaction.request

        if expected.method.upper() != request.method.upper():
            return 'method'

        if not PathMatcher.paths_match(expected.path, request.path):
            return 'path'

        if not self._headers_match(expected.headers, request.headers):
            return 'headers'

        if not self._query_matches(expected.query, request.query):
            return 'query'

        return None

    def _headers_match(self, expected: Dict[str, str], actual: Dict[str, str]) -> bool:
        """Every expected header must be present with an equal value; extras are ignored."""
        for name, value in expected.items():
            if name.lower() not in actual:
                return False
            if actual[name.lower()].strip() != value.strip():
                return False
        return True

    def _query_matches(
        self,
        expected: Dict[str, Tuple[str, ...]],
        actual: Dict[str, Tuple[str, ...]]
    ) -> bool:
        """Every expected parameter must be present with the same values, in any order."""
        for name, values in expected.items():
            if name not in actual:
                return False
            if sorted(actual[name]) != sorted(values):
                return False
        return True

    def _parse_incoming_body(self, request: IncomingRequest) -> Any:
        """Parse the request body as JSON, falling back to the raw text."""
        if not request.body:
            return None
        parsed = safe_json_parse(request.body, default=_MISSING)
        if parsed is _MISSING:
            return request.text
        return parsed

    def _body_matches(self, expected: RequestMatcher, incoming: Any) -> bool:
        """
        Partial structural comparison of the request body.

        An interaction that records no body accepts any body.
        """
        if not expected.has_body:
            return True
        if expected.body is None:
            return incoming is None
        if incoming is None:
            return expected.body == ''
        return self._value_matches(expected.body, incoming)

    def _value_matches(self, expected: Any, actual: Any) -> bool:
        if isinstance(expected, dict):
            if not isinstance(actual, dict):
                return False
            for key, value in expected.items():
                if key not in actual:
                    return False
                if not self._value_matches(value, actual[key]):
                    return False
            return True

        if isinstance(expected, list):
            if not isinstance(actual, list) or len(expected) != len(actual):
                return False
            if self.body_rules.array_order_sensitive:
                return all(self._value_matches(e, a) for e, a in zip(expected, actual))
            return self._unordered_matches(expected, actual, set())

        return self._scalar_matches(expected, actual)

    def _unordered_matches(self, expected: List[Any], actual: List[Any], used: set) -> bool:
        """Assign every expected element to a distinct actual element (backtracking)."""
        if not expected:
            return True
        head, rest = expected[0], expected[1:]
        for index, candidate in enumerate(actual):
            if index in used or not self._value_matches(head, candidate):
                continue
            if self._unordered_matches(rest, actual, used | {index}):
                return True
        return False

    def _scalar_matches(self, expected: Any, actual: Any) -> bool:
        if isinstance(actual, (dict, list)):
            return False

        if self.body_rules.allow_type_coercion:
            return _scalar_text(expected) == _scalar_text(actual)

        # bool is a subclass of int; keep true/false distinct from 1/0
        if isinstance(expected, bool) or isinstance(actual, bool):
            return isinstance(expected, bool) and isinstance(actual, bool) and expected == actual

        if _is_number(expected) and _is_number(actual):
            return expected == actual

        return type(expected) is type(actual) and expected == actual


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _scalar_text(value: Any) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
