from agrimanage.extensions import db
from agrimanage.models import Disease


def create_disease(client, headers, **payload):
    return client.post('/api/diseases/', json=payload, headers=headers)


def test_blast_on_rice(client, auth_headers, plant):
    assert plant['fertilizers'] == ['Urea']

    response = create_disease(
        client, auth_headers,
        name='Blast',
        plantId=plant['id'],
        causalAgent='Magnaporthe oryzae',
        fertilizers=['  Potash ', '']
    )
    assert response.status_code == 201
    body = response.get_json()
    assert body['success'] is True
    assert body['data']['plantId'] == plant['id']
    assert body['data']['fertilizers'] == ['Potash']

    listed = client.get(f"/api/diseases/plant/{plant['id']}").get_json()['data']
    assert [d['name'] for d in listed] == ['Blast']

    via_plant = client.get(f"/api/plants/{plant['id']}/diseases").get_json()['data']
    assert via_plant == listed


def test_create_requires_token(client, plant):
    response = create_disease(client, {}, name='Blast', plantId=plant['id'])
    assert response.status_code == 401


def test_create_with_missing_fields(client, auth_headers):
    response = create_disease(client, auth_headers, causalAgent='Fungus')

    assert response.status_code == 400
    body = response.get_json()
    assert body['success'] is False
    assert body['error'] == 'Validation Error'
    assert set(body['details']['missing_fields']) == {'name', 'plantId'}


def test_create_for_unknown_plant(client, auth_headers):
    response = create_disease(client, auth_headers, name='Blast', plantId=404)
    assert response.status_code == 400
    assert Disease.query.count() == 0


def test_body_must_be_an_object(client, auth_headers):
    response = client.post('/api/diseases/', json=['Blast'], headers=auth_headers)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Unexpected Shape'


def test_get_unknown_disease(client):
    response = client.get('/api/diseases/999')
    assert response.status_code == 404
    assert response.get_json()['message'] == 'Disease not found'


def test_list_for_plant_without_diseases(client, plant):
    response = client.get(f"/api/diseases/plant/{plant['id']}")
    assert response.status_code == 200
    assert response.get_json()['data'] == []


def test_update_keeps_plant(client, auth_headers, plant):
    other = client.post('/api/plants/', json={'name': 'Tomato'}, headers=auth_headers).get_json()['data']
    disease = create_disease(client, auth_headers, name='Blast', plantId=plant['id']).get_json()['data']

    response = client.put(f"/api/diseases/{disease['id']}", json={
        'control': 'Tricyclazole spray',
        'plantId': other['id']
    }, headers=auth_headers)

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['control'] == 'Tricyclazole spray'
    assert data['name'] == 'Blast'
    assert data['plantId'] == plant['id']


def test_delete_disease(client, auth_headers, plant):
    disease = create_disease(client, auth_headers, name='Blast', plantId=plant['id']).get_json()['data']

    response = client.delete(f"/api/diseases/{disease['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json() == {'success': True, 'message': 'Disease deleted'}
    assert client.get(f"/api/diseases/{disease['id']}").status_code == 404


def test_plant_with_diseases_cannot_be_deleted(client, auth_headers, plant):
    disease = create_disease(client, auth_headers, name='Blast', plantId=plant['id']).get_json()['data']

    response = client.delete(f"/api/plants/{plant['id']}", headers=auth_headers)

    assert response.status_code == 409
    assert response.get_json()['details']['count'] == 1

    still_there = client.get(f"/api/diseases/{disease['id']}")
    assert still_there.status_code == 200
    assert still_there.get_json()['data']['plantId'] == plant['id']
    assert db.session.get(Disease, disease['id']) is not None
