import json

from agrimanage.app import create_app
from agrimanage.config import TestingConfig
from agrimanage.services.cost_engine import CostTable


def test_health(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json()['database'] == 'connected'


def test_index(client):
    assert client.get('/').get_json()['name'] == 'AgriManage API'


def test_unknown_route_is_json(client):
    response = client.get('/api/nothing-here')

    assert response.status_code == 404
    assert response.get_json()['success'] is False


def test_invalid_json_body(client, auth_headers):
    response = client.post('/api/plants/', data='{not json',
                           content_type='application/json', headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Validation Error'


def test_default_cost_table(app):
    assert isinstance(app.config['COST_TABLE'], CostTable)
    assert app.config['COST_TABLE'].base_cost('rice') == 52000.0


def test_cost_table_from_file(tmp_path, monkeypatch):
    path = tmp_path / 'costs.json'
    path.write_text(json.dumps({'base_costs': {'Rice': 1000}}))
    monkeypatch.setattr(TestingConfig, 'COST_TABLE_PATH', str(path))

    app = create_app('testing')

    assert app.config['COST_TABLE'].base_cost('Rice') == 1000.0
