import pytest
import requests

from agrimanage.client import AgriManageClient
from agrimanage.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFound,
    PersistenceError,
    ReferentialIntegrityError,
    UnexpectedShapeError,
    ValidationError,
)


class FakeResponse:

    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError('No JSON body')
        return self._body


class FakeSession:
    """Records requests and answers them from a queue of responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_client(*responses, token='abc'):
    session = FakeSession(*responses)
    return AgriManageClient('http://api.test/', token=token, session=session, timeout=5), session


def test_sends_token_and_timeout():
    client, session = make_client(FakeResponse(200, {'success': True, 'data': []}))

    assert client.diseases_for_plant(3) == []

    method, url, kwargs = session.calls[0]
    assert method == 'GET'
    assert url == 'http://api.test/api/diseases/plant/3'
    assert kwargs['headers']['Authorization'] == 'Bearer abc'
    assert kwargs['timeout'] == 5


def test_unwraps_paginated_lists():
    client, _ = make_client(FakeResponse(200, {
        'success': True,
        'data': {'items': [{'id': 1, 'name': 'Rice'}], 'page': 1, 'total': 1}
    }))

    assert client.list_plants(search='rice') == [{'id': 1, 'name': 'Rice'}]


def test_list_endpoint_returning_an_object():
    client, _ = make_client(FakeResponse(200, {'success': True, 'data': {'id': 1}}))

    with pytest.raises(UnexpectedShapeError):
        client.crops_for_location(1)


def test_not_json_response():
    client, _ = make_client(FakeResponse(200, None))

    with pytest.raises(UnexpectedShapeError):
        client.get_plant(1)


@pytest.mark.parametrize('status_code, error', [
    (404, NotFound),
    (400, ValidationError),
    (401, AuthenticationError),
    (403, AuthorizationError),
    (409, ReferentialIntegrityError),
    (500, PersistenceError),
    (503, PersistenceError),
])
def test_error_statuses(status_code, error):
    client, _ = make_client(FakeResponse(status_code, {
        'success': False,
        'error': 'Oops',
        'message': 'went wrong'
    }))

    with pytest.raises(error) as excinfo:
        client.get_disease(9)
    assert excinfo.value.message == 'went wrong'


def test_bad_shape_is_told_apart_from_bad_values():
    client, _ = make_client(FakeResponse(400, {
        'success': False,
        'error': 'Unexpected Shape',
        'message': 'Request body must be a JSON object'
    }))

    with pytest.raises(UnexpectedShapeError) as excinfo:
        client.create_plant(['Rice'])
    assert excinfo.value.message == 'Request body must be a JSON object'


def test_conflict_keeps_details():
    client, _ = make_client(FakeResponse(409, {
        'success': False,
        'error': 'Conflict',
        'message': 'Plant still has 2 disease record(s)',
        'details': {'dependents': 'Disease', 'count': 2}
    }))

    with pytest.raises(ReferentialIntegrityError) as excinfo:
        client.delete_plant(1)
    assert excinfo.value.details == {'dependents': 'Disease', 'count': 2}


def test_network_failure():
    client, _ = make_client(requests.ConnectionError('refused'))

    with pytest.raises(PersistenceError):
        client.get_plant(1)


def test_login_keeps_token():
    client, session = make_client(
        FakeResponse(200, {'success': True, 'access_token': 'new-token', 'user': {'id': 1}}),
        FakeResponse(200, {'success': True, 'data': []}),
        token=None
    )

    assert client.login('farmer@example.com', 'Passw0rd!') == {'id': 1}
    client.user_calculations()

    assert 'Authorization' not in session.calls[0][2]['headers']
    assert session.calls[1][2]['headers']['Authorization'] == 'Bearer new-token'


def test_calculate_payload():
    client, session = make_client(FakeResponse(201, {
        'success': True,
        'data': {'id': 1, 'estimatedCost': 189280.0}
    }))

    result = client.calculate('Rice', 2, 'Scarce', 'Sandy')

    assert result['estimatedCost'] == 189280.0
    assert session.calls[0][2]['json'] == {
        'crop': 'Rice',
        'area': 2,
        'waterResources': 'Scarce',
        'soilType': 'Sandy'
    }


def test_against_the_application(app, client, auth_headers, plant):
    """The client speaks the same envelope the application produces."""
    class FlaskSession:
        def request(self, method, url, headers=None, json=None, params=None, timeout=None):
            path = url.replace('http://localhost', '')
            response = client.open(path, method=method, headers=headers,
                                   json=json, query_string=params)
            return FakeResponse(response.status_code, response.get_json())

    api = AgriManageClient('http://localhost',
                           token=auth_headers['Authorization'].split()[1],
                           session=FlaskSession())

    disease = api.create_disease({'name': 'Blast', 'plantId': plant['id']})
    assert api.diseases_for_plant(plant['id']) == [disease]

    api.update_disease(disease['id'], {'control': 'Resistant varieties'})
    assert api.get_disease(disease['id'])['control'] == 'Resistant varieties'

    assert api.delete_disease(disease['id']) == 'Disease deleted'
    with pytest.raises(NotFound):
        api.get_disease(disease['id'])

    api.create_disease({'name': 'Sheath Blight', 'plantId': plant['id']})
    with pytest.raises(ReferentialIntegrityError) as excinfo:
        api.delete_plant(plant['id'])
    assert excinfo.value.details['dependents'] == 'Disease'
