from tests.conftest import PASSWORD, register


def test_register_and_login(client):
    headers, user = register(client, 'New@Example.com', full_name='New User')
    assert user['email'] == 'new@example.com'
    assert user['role'] == 'user'

    response = client.post('/api/v1/auth/login', json={'email': 'new@example.com', 'password': PASSWORD})
    assert response.status_code == 200
    assert response.get_json()['access_token']

    response = client.get('/api/v1/auth/me', headers=headers)
    assert response.status_code == 200
    assert response.get_json()['donor_id'] is None


def test_register_rejects_duplicates_and_weak_passwords(client):
    register(client, 'dup@example.com')
    response = client.post('/api/v1/auth/register', json={'email': 'dup@example.com', 'password': PASSWORD})
    assert response.status_code == 409

    response = client.post('/api/v1/auth/register', json={'email': 'weak@example.com', 'password': 'short'})
    assert response.status_code == 400
    assert 'Password' in response.get_json()['error']


def test_login_with_wrong_password(client):
    register(client, 'user@example.com')
    response = client.post('/api/v1/auth/login', json={'email': 'user@example.com', 'password': 'nope-nope'})
    assert response.status_code == 401


def test_protected_routes_need_a_token(client):
    assert client.get('/api/v1/auth/me').status_code == 401
    assert client.get('/api/v1/donors/eligible').status_code == 401


def test_non_json_body_is_rejected(client):
    response = client.post('/api/v1/auth/login', data='not json', content_type='text/plain')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'No input data provided'


def test_unknown_route_returns_json(client):
    response = client.get('/api/v1/nothing-here')
    assert response.status_code == 404
    assert 'error' in response.get_json()
