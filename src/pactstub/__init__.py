"""
PactStub

Programmable HTTP stub replaying recorded pact interactions for
consumer-driven contract testing.
"""

from .common import FetchError, InvalidContract, PactStubError, PortUnavailable
from .stub import Stub, StubConfig

__all__ = [
    'Stub',
    'StubConfig',
    'PactStubError',
    'InvalidContract',
    'FetchError',
    'PortUnavailable',
]

__version__ = '1.0.0'
