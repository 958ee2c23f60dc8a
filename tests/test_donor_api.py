from tests.conftest import donor_payload, register


def add_donor(client, admin_headers, **overrides):
    response = client.post('/api/v1/donors/', json=donor_payload(**overrides), headers=admin_headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_admin_creates_and_lists_donors(client, admin_headers):
    add_donor(client, admin_headers, name='Alice', city='Springfield', blood_type='O+')
    add_donor(client, admin_headers, name='Bob', city='Spring Valley', blood_type='A-')
    add_donor(client, admin_headers, name='Carl', city='Boston', blood_type='O+')

    response = client.get('/api/v1/donors/?city=spring&sort=name&direction=asc', headers=admin_headers)
    assert response.status_code == 200
    rows = response.get_json()
    assert [r['name'] for r in rows] == ['Alice', 'Bob']
    assert all(r['donation_count'] == 0 for r in rows)

    response = client.get('/api/v1/donors/?search_field=name&search=car&blood_group=O%2B', headers=admin_headers)
    assert [r['name'] for r in response.get_json()] == ['Carl']


def test_invalid_donor_is_rejected_with_readable_message(client, admin_headers):
    response = client.post('/api/v1/donors/', json=donor_payload(age=70), headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json() == {'error': 'Age must be a number between 18 and 65.'}


def test_regular_users_cannot_manage_donors(client, donor_account):
    headers, donor = donor_account
    assert client.get('/api/v1/donors/', headers=headers).status_code == 403
    assert client.delete(f"/api/v1/donors/{donor['id']}", headers=headers).status_code == 403
    assert client.post(f"/api/v1/donors/{donor['id']}/donations", headers=headers).status_code == 403


def test_self_registration_links_account(client, donor_account):
    headers, donor = donor_account
    assert donor['user_id'] is not None
    assert donor['is_eligible'] is True

    response = client.get('/api/v1/donors/me', headers=headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body['id'] == donor['id']
    assert body['eligibility']['cooldown_eligible'] is True
    assert body['eligibility']['days_remaining'] == 0

    response = client.post('/api/v1/donors/register', json=donor_payload(), headers=headers)
    assert response.status_code == 409


def test_owner_cannot_override_eligibility_flag(client, donor_account, admin_headers):
    headers, donor = donor_account
    url = f"/api/v1/donors/{donor['id']}"

    response = client.put(url, json={'city': 'Capital City'}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()['city'] == 'Capital City'

    assert client.put(url, json={'is_eligible': False}, headers=headers).status_code == 403
    response = client.put(url, json={'is_eligible': False}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['is_eligible'] is False


def test_other_users_cannot_edit_a_profile(client, donor_account):
    _, donor = donor_account
    stranger, _ = register(client, 'stranger@example.com')
    response = client.put(f"/api/v1/donors/{donor['id']}", json={'city': 'X-ville'}, headers=stranger)
    assert response.status_code == 403


def test_eligible_donor_listing(client, admin_headers):
    add_donor(client, admin_headers, name='Yes', blood_type='B+', city='Springfield')
    add_donor(client, admin_headers, name='No', blood_type='B+', city='Springfield', is_eligible=False)
    add_donor(client, admin_headers, name='Other type', blood_type='AB-', city='Springfield')

    response = client.get('/api/v1/donors/eligible?blood_type=B%2B&city=field', headers=admin_headers)
    assert [d['name'] for d in response.get_json()] == ['Yes']

    response = client.get('/api/v1/donors/eligible?blood_type=Q', headers=admin_headers)
    assert response.status_code == 400


def test_add_and_reset_donations(client, admin_headers):
    donor = add_donor(client, admin_headers)
    url = f"/api/v1/donors/{donor['id']}/donations"

    response = client.post(url, headers=admin_headers)
    assert response.status_code == 201
    body = response.get_json()
    assert body['donation']['request_id'] is None
    assert body['donor']['last_donation_date'] is not None

    response = client.get(f"/api/v1/donors/{donor['id']}/eligibility", headers=admin_headers)
    eligibility = response.get_json()
    assert eligibility['cooldown_eligible'] is False
    assert eligibility['days_remaining'] == 90

    response = client.post('/api/v1/donors/donation-counts', json={'donor_ids': [donor['id']]}, headers=admin_headers)
    assert response.get_json() == {str(donor['id']): 1}

    response = client.delete(url, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()['deleted'] == 1
    assert response.get_json()['donor']['last_donation_date'] is None

    response = client.post('/api/v1/donors/donation-counts', json={'donor_ids': [donor['id']]}, headers=admin_headers)
    assert response.get_json() == {str(donor['id']): 0}


def test_idempotency_key_prevents_duplicate_donations(client, admin_headers):
    donor = add_donor(client, admin_headers)
    url = f"/api/v1/donors/{donor['id']}/donations"
    headers = dict(admin_headers, **{'Idempotency-Key': 'drive-2026-10-19-1'})

    first = client.post(url, headers=headers).get_json()['donation']
    second = client.post(url, headers=headers).get_json()['donation']
    assert first['id'] == second['id']
    assert len(client.get(url, headers=admin_headers).get_json()) == 1


def test_delete_donor(client, admin_headers):
    donor = add_donor(client, admin_headers)
    assert client.delete(f"/api/v1/donors/{donor['id']}", headers=admin_headers).status_code == 200
    response = client.get(f"/api/v1/donors/{donor['id']}", headers=admin_headers)
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Donor not found'}


def test_nearby_donors(client, admin_headers):
    # Central London, Oxford (~80 km) and a donor without coordinates
    add_donor(client, admin_headers, name='Camden', latitude=51.539, longitude=-0.1426, blood_type='O-')
    add_donor(client, admin_headers, name='Westminster', latitude=51.4975, longitude=-0.1357, blood_type='A+')
    add_donor(client, admin_headers, name='Oxford', latitude=51.752, longitude=-1.2577, blood_type='O-')
    add_donor(client, admin_headers, name='Unknown', blood_type='O-')

    response = client.get('/api/v1/donors/nearby?lat=51.5074&lng=-0.1278&radius_km=20', headers=admin_headers)
    assert response.status_code == 200
    rows = response.get_json()
    assert [r['name'] for r in rows] == ['Westminster', 'Camden']
    assert rows[0]['distance_km'] < rows[1]['distance_km'] < 20

    response = client.get('/api/v1/donors/nearby?lat=51.5074&lng=-0.1278&radius_km=100&compatible_with=O-',
                          headers=admin_headers)
    assert [r['name'] for r in response.get_json()] == ['Camden', 'Oxford']

    response = client.get('/api/v1/donors/nearby?lat=51.5074&lng=-0.1278&radius_km=100&compatible_with=O-&blood_type=A%2B',
                          headers=admin_headers)
    assert response.get_json() == []

    response = client.get('/api/v1/donors/nearby?lat=123&lng=0', headers=admin_headers)
    assert response.status_code == 400
    response = client.get('/api/v1/donors/nearby?lat=51.5', headers=admin_headers)
    assert response.status_code == 400


def test_donation_counts_reject_malformed_ids(client, admin_headers):
    for donor_ids in ([[1]], [{'a': 1}], [True]):
        response = client.post('/api/v1/donors/donation-counts', json={'donor_ids': donor_ids},
                               headers=admin_headers)
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Donor ids must be whole numbers'}


def test_admin_create_donor_validates_user_id(client, admin_headers):
    response = client.post('/api/v1/donors/', json=donor_payload(user_id='someone'), headers=admin_headers)
    assert response.status_code == 400

    response = client.post('/api/v1/donors/', json=donor_payload(user_id=9999), headers=admin_headers)
    assert response.status_code == 404
    assert response.get_json() == {'error': 'User not found'}

    _, user = register(client, 'linked@example.com')
    response = client.post('/api/v1/donors/', json=donor_payload(user_id=user['id']), headers=admin_headers)
    assert response.status_code == 201
    assert response.get_json()['user_id'] == user['id']
