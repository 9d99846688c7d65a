"""Tests for PactStub filter state."""

from pactstub.stub.contract import Interaction
from pactstub.stub.filters import FilterState, NO_FILTERS


class TestFilterState:
    """Test FilterState snapshots."""

    def test_empty_by_default(self):
        """Test the default state has no constraints."""
        assert NO_FILTERS.is_empty
        assert NO_FILTERS.rejection(Interaction(description='anything', provider_state='any')) is None

    def test_with_provider_state_returns_new_state(self):
        """Test updates never mutate the original."""
        filters = NO_FILTERS.with_provider_state('a widget exists')

        assert filters.provider_state == 'a widget exists'
        assert NO_FILTERS.provider_state == ''
        assert not filters.is_empty

    def test_none_clears_filter(self):
        """Test None is treated as an empty filter."""
        filters = FilterState(description='x').with_description(None)

        assert filters.is_empty

    def test_rejection(self):
        """Test the failing filter is named, provider state first."""
        filters = FilterState(provider_state='s1', description='d1')

        assert filters.rejection(Interaction(description='d1', provider_state='s1')) is None
        assert filters.rejection(Interaction(description='d1', provider_state='s2')) == 'provider_state'
        assert filters.rejection(Interaction(description='d2', provider_state='s1')) == 'description'
        assert filters.rejection(Interaction(description='d2', provider_state='s2')) == 'provider_state'

    def test_to_dict(self):
        """Test admin API representation."""
        assert FilterState(provider_state='s').to_dict() == {'providerState': 's', 'description': ''}
