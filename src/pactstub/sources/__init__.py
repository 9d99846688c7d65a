"""
PactStub Contract Sources

Providers that fetch contract text for a stub to load.
"""

from .contract_source import ContractSource, TextSource, FileSource, BrokerSource, resolve_source

__all__ = [
    'ContractSource',
    'TextSource',
    'FileSource',
    'BrokerSource',
    'resolve_source',
]
