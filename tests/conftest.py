# =============================================================================
# AgriManage Backend
# tests/conftest.py - Shared Test Fixtures
# =============================================================================

import pytest

from agrimanage.app import create_app
from agrimanage.extensions import db, bcrypt
from agrimanage.models import User

USER_PASSWORD = 'Passw0rd!'
ADMIN_EMAIL = 'admin@example.com'
ADMIN_PASSWORD = 'Adm1nPass!'


@pytest.fixture
def app():
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, email='farmer@example.com', password=USER_PASSWORD, **extra):
    payload = {'email': email, 'password': password}
    payload.update(extra)
    return client.post('/api/auth/register', json=payload)


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(client):
    response = register(client)
    assert response.status_code == 201
    return bearer(response.get_json()['access_token'])


@pytest.fixture
def admin_headers(app, client):
    admin = User(
        email=ADMIN_EMAIL,
        password_hash=bcrypt.generate_password_hash(ADMIN_PASSWORD).decode('utf-8'),
        first_name='Admin',
        role='admin',
        is_active=True
    )
    db.session.add(admin)
    db.session.commit()

    response = client.post('/api/auth/login', json={
        'email': ADMIN_EMAIL,
        'password': ADMIN_PASSWORD
    })
    assert response.status_code == 200
    return bearer(response.get_json()['access_token'])


@pytest.fixture
def plant(client, auth_headers):
    response = client.post('/api/plants/', json={
        'name': 'Rice',
        'climate': 'Tropical',
        'fertilizers': 'Urea'
    }, headers=auth_headers)
    assert response.status_code == 201
    return response.get_json()['data']


@pytest.fixture
def location(client, auth_headers):
    response = client.post('/api/locations/', json={
        'province': 'Western',
        'district': 'Colombo',
        'city': 'Homagama',
        'areaSize': '10 acres'
    }, headers=auth_headers)
    assert response.status_code == 201
    return response.get_json()['data']
