from datetime import datetime

import pytest

from donorlink import create_app
from donorlink.config import TestingConfig
from donorlink.extensions import db
from donorlink.services.accounts import create_user

PASSWORD = 'password123'
NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Application context for tests that call the services directly"""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def donor_payload(**overrides):
    data = {
        'name': 'Jane Doe',
        'email': 'jane@example.com',
        'phone': '+1 555 123 4567',
        'age': 30,
        'weight': 70,
        'blood_type': 'O+',
        'city': 'Springfield',
        'address': '12 Evergreen Terrace',
    }
    data.update(overrides)
    return data


def register(client, email, full_name=None, phone='0712345678'):
    response = client.post('/api/v1/auth/register', json={
        'email': email, 'password': PASSWORD, 'full_name': full_name, 'phone': phone,
    })
    assert response.status_code == 201, response.get_json()
    body = response.get_json()
    return {'Authorization': f"Bearer {body['access_token']}"}, body['user']


@pytest.fixture
def admin_headers(app, client):
    with app.app_context():
        create_user('admin@example.com', PASSWORD, full_name='Admin', role='admin')
    response = client.post('/api/v1/auth/login', json={'email': 'admin@example.com', 'password': PASSWORD})
    return {'Authorization': f"Bearer {response.get_json()['access_token']}"}


@pytest.fixture
def donor_account(client):
    """A registered user with a linked donor profile: (headers, donor json)"""
    headers, _ = register(client, 'donor@example.com', full_name='Dan Donor')
    response = client.post('/api/v1/donors/register', json=donor_payload(name='Dan Donor', email=None),
                           headers=headers)
    assert response.status_code == 201, response.get_json()
    return headers, response.get_json()


@pytest.fixture
def recipient_headers(client):
    headers, _ = register(client, 'recipient@example.com', full_name='Rita Recipient')
    return headers
