"""
PactStub Contract Model

Parsing and in-memory representation of a pact contract document.

Parsing is deliberately loose: a document only has to be well-formed JSON.
Missing or oddly shaped keys become empty values so externally authored
contracts that omit optional fields still load.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..common.errors import InvalidContract
from ..common.utils import normalize_headers, normalize_query


logger = logging.getLogger('pactstub.contract')


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_text(value: Any) -> str:
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class RequestMatcher:
    """Expected shape of a request for one interaction."""

    method: str = 'GET'
    path: str = '/'
    query: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    has_body: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'RequestMatcher':
        """Create RequestMatcher from the "request" object of an interaction."""
        data = _as_mapping(data)
        return cls(
            method=_as_text(data.get('method')).upper() or 'GET',
            path=_as_text(data.get('path')) or '/',
            query=normalize_query(data.get('query')),
            headers=normalize_headers(data.get('headers')),
            body=data.get('body'),
            has_body='body' in data
        )


@dataclass(frozen=True)
class ResponseTemplate:
    """Canned response replayed when an interaction matches."""

    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    has_body: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ResponseTemplate':
        """Create ResponseTemplate from the "response" object of an interaction."""
        data = _as_mapping(data)
        try:
            status = int(data.get('status', 200))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring invalid response status {data.get('status')!r}, using 200")
            status = 200

        headers = {}
        for name, value in _as_mapping(data.get('headers')).items():
            if isinstance(value, (list, tuple)):
                value = ', '.join(str(v) for v in value)
            headers[str(name)] = str(value)

        return cls(
            status=status,
            headers=headers,
            body=data.get('body'),
            has_body='body' in data
        )

    def render_body(self) -> bytes:
        """
        Serialize the body for the wire.

        Strings are written verbatim, structured values as JSON, and an
        absent body as no content.
        """
        if not self.has_body or self.body is None:
            return b''
        if isinstance(self.body, str):
            return self.body.encode('utf-8')
        return json.dumps(self.body).encode('utf-8')

    def content_type(self) -> Optional[str]:
        """Content type declared by the template, or a JSON default for structured bodies."""
        for name, value in self.headers.items():
            if name.lower() == 'content-type':
                return value
        if self.has_body and not isinstance(self.body, str) and self.body is not None:
            return 'application/json'
        return None


@dataclass(frozen=True)
class Interaction:
    """One request/response pair recorded in a contract."""

    description: str = ''
    provider_state: str = ''
    request: RequestMatcher = field(default_factory=RequestMatcher)
    response: ResponseTemplate = field(default_factory=ResponseTemplate)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Interaction':
        """Create Interaction from a pact interaction object (v2 or v3 layout)."""
        provider_state = data.get('providerState', data.get('provider_state'))
        if provider_state is None:
            # Pact v3 records a list of states; the first one names the precondition
            states = data.get('providerStates')
            if isinstance(states, list) and states:
                first = states[0]
                provider_state = first.get('name') if isinstance(first, Mapping) else first

        return cls(
            description=_as_text(data.get('description')),
            provider_state=_as_text(provider_state),
            request=RequestMatcher.from_dict(data.get('request')),
            response=ResponseTemplate.from_dict(data.get('response'))
        )

    def summary(self) -> Dict[str, Any]:
        """Short description used by the admin API and diagnostics."""
        return {
            'description': self.description,
            'providerState': self.provider_state,
            'method': self.request.method,
            'path': self.request.path,
            'status': self.response.status
        }


@dataclass(frozen=True)
class ContractDocument:
    """An immutable, ordered set of interactions between a consumer and a provider."""

    interactions: Tuple[Interaction, ...] = ()
    consumer: str = ''
    provider: str = ''
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.interactions)

    def __iter__(self):
        return iter(self.interactions)

    @classmethod
    def from_dict(cls, data: Any) -> 'ContractDocument':
        """
        Build a document from parsed JSON.

        A root that is not an object, or an "interactions" value that is not
        a list, yields an empty document rather than an error.

        Args:
            data: Parsed JSON value

        Returns:
            ContractDocument
        """
        if not isinstance(data, Mapping):
            logger.warning(f"Contract root is a {type(data).__name__}, expected an object; no interactions loaded")
            return cls()

        raw_interactions = data.get('interactions')
        if not isinstance(raw_interactions, list):
            raw_interactions = []

        interactions: List[Interaction] = []
        for index, raw in enumerate(raw_interactions):
            if not isinstance(raw, Mapping):
                logger.warning(f"Skipping interaction {index}: expected an object, got {type(raw).__name__}")
                continue
            interactions.append(Interaction.from_dict(raw))

        return cls(
            interactions=tuple(interactions),
            consumer=_as_text(_as_mapping(data.get('consumer')).get('name')),
            provider=_as_text(_as_mapping(data.get('provider')).get('name')),
            metadata=dict(_as_mapping(data.get('metadata')))
        )

    def to_summary(self) -> Dict[str, Any]:
        """Convert to a summary dictionary."""
        return {
            'consumer': self.consumer,
            'provider': self.provider,
            'total': len(self.interactions),
            'interactions': [i.summary() for i in self.interactions]
        }


def validate_contract(text: Any) -> Any:
    """
    Check that contract text is well-formed JSON.

    Args:
        text: Contract text

    Returns:
        The parsed JSON value

    Raises:
        InvalidContract: If the text is not valid JSON
    """
    if isinstance(text, bytes):
        try:
            text = text.decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidContract(f"The pact file is not valid UTF-8: {e}") from e

    if not isinstance(text, str):
        raise InvalidContract(f"The pact must be JSON text, got {type(text).__name__}")

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidContract(f"The pact file is not a valid JSON document: {e}") from e


def parse_contract(text: Any) -> ContractDocument:
    """
    Parse contract text into a ContractDocument.

    Raises:
        InvalidContract: If the text is not valid JSON
    """
    return ContractDocument.from_dict(validate_contract(text))
