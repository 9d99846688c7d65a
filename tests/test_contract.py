"""
Tests for PactStub Contract Model

Tests contract parsing including:
- JSON validation
- Loose parsing of incomplete documents
- Pact v2 and v3 provider states and queries
- Response template rendering
"""

import json

import pytest

from pactstub.common.errors import InvalidContract
from pactstub.stub.contract import (
    ContractDocument,
    Interaction,
    RequestMatcher,
    ResponseTemplate,
    parse_contract,
    validate_contract
)


class TestValidateContract:
    """Test JSON validation of contract text."""

    def test_valid_json(self):
        """Test valid JSON returns the parsed value."""
        assert validate_contract('{"interactions": []}') == {'interactions': []}

    def test_bytes_accepted(self):
        """Test UTF-8 bytes are decoded."""
        assert validate_contract(b'{"a": 1}') == {'a': 1}

    def test_invalid_json(self):
        """Test malformed text raises InvalidContract."""
        with pytest.raises(InvalidContract) as exc_info:
            validate_contract('{not json')

        assert 'not a valid JSON document' in str(exc_info.value)

    def test_empty_text(self):
        """Test empty text is not valid JSON."""
        with pytest.raises(InvalidContract):
            validate_contract('')

    def test_non_text(self):
        """Test a non-string value is rejected."""
        with pytest.raises(InvalidContract):
            validate_contract(None)


class TestParseContract:
    """Test building a ContractDocument."""

    def test_parse_sample(self, sample_pact_text):
        """Test parsing a complete pact."""
        document = parse_contract(sample_pact_text)

        assert len(document) == 6
        assert document.consumer == 'WidgetClient'
        assert document.provider == 'WidgetService'
        assert document.metadata['pactSpecification']['version'] == '2.0.0'

    def test_document_order_preserved(self, sample_pact_text):
        """Test interactions keep their document order."""
        document = parse_contract(sample_pact_text)

        descriptions = [i.description for i in document]

        assert descriptions[:2] == ['get widget', 'get missing widget']

    def test_missing_interactions(self):
        """Test a document without interactions is empty, not an error."""
        document = parse_contract('{"consumer": {"name": "C"}}')

        assert len(document) == 0
        assert document.consumer == 'C'

    def test_non_object_root(self):
        """Test a JSON array root yields an empty document."""
        assert len(parse_contract('[1, 2, 3]')) == 0

    def test_interactions_not_a_list(self):
        """Test an odd interactions value yields an empty document."""
        assert len(parse_contract('{"interactions": {"a": 1}}')) == 0

    def test_non_object_entries_skipped(self):
        """Test entries that are not objects are skipped."""
        document = parse_contract(json.dumps({
            'interactions': ['oops', {'description': 'ok'}, 42]
        }))

        assert len(document) == 1
        assert document.interactions[0].description == 'ok'

    def test_to_summary(self, sample_pact_text):
        """Test summary dictionary."""
        summary = parse_contract(sample_pact_text).to_summary()

        assert summary['total'] == 6
        assert summary['interactions'][1] == {
            'description': 'get missing widget',
            'providerState': 'no widgets exist',
            'method': 'GET',
            'path': '/widgets/1',
            'status': 404
        }

    def test_default_document(self):
        """Test the empty default document."""
        document = ContractDocument()

        assert len(document) == 0
        assert list(document) == []


class TestInteraction:
    """Test Interaction parsing."""

    def test_defaults(self):
        """Test an interaction with every field missing."""
        interaction = Interaction.from_dict({})

        assert interaction.description == ''
        assert interaction.provider_state == ''
        assert interaction.request.method == 'GET'
        assert interaction.request.path == '/'
        assert interaction.response.status == 200

    def test_v3_provider_states(self):
        """Test the first v3 provider state names the interaction state."""
        interaction = Interaction.from_dict({
            'providerStates': [{'name': 'a widget exists'}, {'name': 'user is admin'}]
        })

        assert interaction.provider_state == 'a widget exists'

    def test_v2_provider_state_wins(self):
        """Test providerState is preferred over providerStates."""
        interaction = Interaction.from_dict({
            'providerState': 'v2 state',
            'providerStates': [{'name': 'v3 state'}]
        })

        assert interaction.provider_state == 'v2 state'


class TestRequestMatcher:
    """Test RequestMatcher parsing."""

    def test_method_upper_cased(self):
        """Test method normalization."""
        assert RequestMatcher.from_dict({'method': 'post'}).method == 'POST'

    def test_query_string(self):
        """Test v2 query strings."""
        matcher = RequestMatcher.from_dict({'query': 'a=1&b=2&b=3'})

        assert matcher.query == {'a': ('1',), 'b': ('2', '3')}

    def test_query_mapping(self):
        """Test v3 query mappings."""
        matcher = RequestMatcher.from_dict({'query': {'a': ['1'], 'b': '2'}})

        assert matcher.query == {'a': ('1',), 'b': ('2',)}

    def test_headers_lower_cased(self):
        """Test header names are lower-cased."""
        matcher = RequestMatcher.from_dict({'headers': {'Content-Type': 'application/json'}})

        assert matcher.headers == {'content-type': 'application/json'}

    def test_body_presence(self):
        """Test an explicit null body differs from an absent body."""
        assert RequestMatcher.from_dict({'body': None}).has_body is True
        assert RequestMatcher.from_dict({}).has_body is False


class TestResponseTemplate:
    """Test ResponseTemplate parsing and rendering."""

    def test_render_structured_body(self):
        """Test objects are serialized as JSON."""
        template = ResponseTemplate.from_dict({'status': 200, 'body': {'id': 1}})

        assert json.loads(template.render_body()) == {'id': 1}
        assert template.content_type() == 'application/json'

    def test_render_string_body(self):
        """Test strings are written verbatim."""
        template = ResponseTemplate.from_dict({'body': 'plain text'})

        assert template.render_body() == b'plain text'
        assert template.content_type() is None

    def test_render_absent_body(self):
        """Test an absent body renders as no content."""
        template = ResponseTemplate.from_dict({'status': 204})

        assert template.render_body() == b''
        assert template.content_type() is None

    def test_declared_content_type(self):
        """Test a declared Content-Type wins over the JSON default."""
        template = ResponseTemplate.from_dict({
            'headers': {'content-type': 'application/hal+json'},
            'body': {'id': 1}
        })

        assert template.content_type() == 'application/hal+json'

    def test_invalid_status(self):
        """Test a non-numeric status falls back to 200."""
        assert ResponseTemplate.from_dict({'status': 'teapot'}).status == 200

    def test_string_status(self):
        """Test a numeric string status is accepted."""
        assert ResponseTemplate.from_dict({'status': '418'}).status == 418

    def test_list_header_joined(self):
        """Test multi-valued headers are joined."""
        template = ResponseTemplate.from_dict({'headers': {'Vary': ['Accept', 'Origin']}})

        assert template.headers == {'Vary': 'Accept, Origin'}
