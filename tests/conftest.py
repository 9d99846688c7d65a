"""Shared fixtures for PactStub tests."""

import json

import pytest


@pytest.fixture
def sample_pact():
    """A pact covering filters, queries, headers, bodies and path placeholders."""
    return {
        'consumer': {'name': 'WidgetClient'},
        'provider': {'name': 'WidgetService'},
        'interactions': [
            {
                'description': 'get widget',
                'providerState': 'a widget exists',
                'request': {'method': 'GET', 'path': '/widgets/1'},
                'response': {
                    'status': 200,
                    'headers': {'Content-Type': 'application/json'},
                    'body': {'id': 1, 'name': 'Sprocket'}
                }
            },
            {
                'description': 'get missing widget',
                'providerState': 'no widgets exist',
                'request': {'method': 'GET', 'path': '/widgets/1'},
                'response': {'status': 404, 'body': {'error': 'not found'}}
            },
            {
                'description': 'search widgets',
                'request': {
                    'method': 'GET',
                    'path': '/widgets',
                    'query': 'colour=red&size=large'
                },
                'response': {'status': 200, 'body': [{'id': 2}]}
            },
            {
                'description': 'create widget',
                'request': {
                    'method': 'POST',
                    'path': '/widgets',
                    'headers': {'Content-Type': 'application/json'},
                    'body': {'name': 'Gear', 'tags': ['a', 'b']}
                },
                'response': {'status': 201, 'body': {'id': 3}}
            },
            {
                'description': 'get order item',
                'request': {'method': 'GET', 'path': '/orders/{orderId}/items/:itemId'},
                'response': {'status': 200, 'body': {'item': True}}
            },
            {
                'description': 'secure widgets',
                'request': {
                    'method': 'GET',
                    'path': '/secure/widgets',
                    'headers': {'Authorization': 'Bearer abc'}
                },
                'response': {'status': 200, 'body': 'top secret'}
            }
        ],
        'metadata': {'pactSpecification': {'version': '2.0.0'}}
    }


@pytest.fixture
def sample_pact_text(sample_pact):
    return json.dumps(sample_pact)


@pytest.fixture
def widget_pact_text():
    """The single-interaction widget contract."""
    return json.dumps({
        'interactions': [
            {
                'description': 'get widget',
                'request': {'method': 'GET', 'path': '/widgets/1'},
                'response': {'status': 200, 'body': {'id': 1}}
            }
        ]
    })
