"""
PactStub Filter State

Provider-state and description filters narrowing the interactions eligible
for matching. Instances are immutable; every change produces a new snapshot
so concurrent requests never observe a half-applied update.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from .contract import Interaction


@dataclass(frozen=True)
class FilterState:
    """Active interaction filters. Empty strings mean "no constraint"."""

    provider_state: str = ''
    description: str = ''

    def with_provider_state(self, value: str) -> 'FilterState':
        return replace(self, provider_state=value or '')

    def with_description(self, value: str) -> 'FilterState':
        return replace(self, description=value or '')

    @property
    def is_empty(self) -> bool:
        return not self.provider_state and not self.description

    def rejection(self, interaction: Interaction) -> Optional[str]:
        """Name the filter that excludes the interaction ("provider_state" or "description"), or None."""
        if self.provider_state and interaction.provider_state != self.provider_state:
            return 'provider_state'
        if self.description and interaction.description != self.description:
            return 'description'
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'providerState': self.provider_state,
            'description': self.description
        }


NO_FILTERS = FilterState()
