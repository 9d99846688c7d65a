"""
PactStub Stub Module

HTTP stub server replaying pact contract interactions.

This module provides:
- Contract document model and validation
- Interaction matching engine
- Provider-state and description filters
- FastAPI/uvicorn listener with an admin API
- Echo mode
"""

from .config import StubConfig
from .contract import (
    ContractDocument,
    Interaction,
    RequestMatcher,
    ResponseTemplate,
    parse_contract,
    validate_contract
)
from .filters import FilterState
from .matcher import BodyMatchRules, IncomingRequest, InteractionMatcher, MatchResult
from .server import StubMetrics, StubResponse, create_app
from .listener import HttpListener
from .session import Stub

__all__ = [
    # Session
    'Stub',
    'StubConfig',

    # Contract
    'ContractDocument',
    'Interaction',
    'RequestMatcher',
    'ResponseTemplate',
    'parse_contract',
    'validate_contract',

    # Matching
    'FilterState',
    'BodyMatchRules',
    'IncomingRequest',
    'InteractionMatcher',
    'MatchResult',

    # HTTP
    'StubMetrics',
    'StubResponse',
    'create_app',
    'HttpListener',
]
