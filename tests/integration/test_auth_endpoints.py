"""
Integration tests for authentication endpoints.
"""
import json

from fleetsub.models.user import User, UserRole


def post_json(client, url, payload, headers=None):
    return client.post(
        url, data=json.dumps(payload), content_type='application/json', headers=headers
    )


def test_register_admin_success(client, db):
    """Test successful admin registration."""
    response = post_json(client, '/api/auth/register-admin', {
        'email': 'Owner@Example.com',
        'password': 'password123',
        'name': 'Fleet Owner',
    })

    assert response.status_code == 201
    data = json.loads(response.data)
    assert data['access_token']
    assert data['refresh_token']
    assert data['user']['email'] == 'owner@example.com'
    assert data['user']['role'] == 'admin'
    assert 'password' not in data['user']

    user = User.query.filter_by(email='owner@example.com').first()
    assert user is not None
    assert user.check_password('password123')


def test_register_admin_missing_fields(client):
    response = post_json(client, '/api/auth/register-admin', {'password': 'password123'})

    assert response.status_code == 400
    data = json.loads(response.data)
    assert data['code'] == 'VALIDATION_FAILED'
    assert 'Missing required fields' in data['message']


def test_register_admin_invalid_email(client):
    response = post_json(client, '/api/auth/register-admin', {
        'email': 'invalid-email', 'password': 'password123'
    })

    assert response.status_code == 400
    assert 'Invalid email format' in json.loads(response.data)['message']


def test_register_admin_short_password(client):
    response = post_json(client, '/api/auth/register-admin', {
        'email': 'owner@example.com', 'password': '123'
    })

    assert response.status_code == 400
    assert 'at least 6 characters' in json.loads(response.data)['message']


def test_register_admin_duplicate_email(client, make_user):
    make_user(email='owner@example.com')

    response = post_json(client, '/api/auth/register-admin', {
        'email': 'owner@example.com', 'password': 'password123'
    })

    assert response.status_code == 409
    assert json.loads(response.data)['code'] == 'CONFLICT'


def test_login_success(client, make_user):
    make_user(email='owner@example.com', password='password123')

    response = post_json(client, '/api/auth/login', {
        'email': 'owner@example.com', 'password': 'password123'
    })

    assert response.status_code == 200
    data = json.loads(response.data)
    assert 'access_token' in data
    assert data['user']['email'] == 'owner@example.com'


def test_login_invalid_credentials(client, make_user):
    make_user(email='owner@example.com', password='password123')

    response = post_json(client, '/api/auth/login', {
        'email': 'owner@example.com', 'password': 'wrongpassword'
    })

    assert response.status_code == 401
    assert 'Invalid email or password' in json.loads(response.data)['message']


def test_login_deactivated_account(client, make_user):
    make_user(email='owner@example.com', password='password123', is_active=False)

    response = post_json(client, '/api/auth/login', {
        'email': 'owner@example.com', 'password': 'password123'
    })

    assert response.status_code == 401
    assert 'deactivated' in json.loads(response.data)['message']


def test_login_missing_fields(client):
    response = post_json(client, '/api/auth/login', {'email': 'owner@example.com'})
    assert response.status_code == 400


def test_refresh_token(client, make_user):
    make_user(email='owner@example.com', password='password123')
    tokens = json.loads(post_json(client, '/api/auth/login', {
        'email': 'owner@example.com', 'password': 'password123'
    }).data)

    response = client.post(
        '/api/auth/refresh',
        headers={'Authorization': f"Bearer {tokens['refresh_token']}"}
    )

    assert response.status_code == 200
    assert 'access_token' in json.loads(response.data)


def test_refresh_rejects_access_token(client, admin, auth_headers):
    response = client.post('/api/auth/refresh', headers=auth_headers(admin))
    assert response.status_code == 401


def test_me(client, admin, auth_headers):
    response = client.get('/api/auth/me', headers=auth_headers(admin))

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['id'] == admin.id
    assert data['role'] == 'admin'
    assert data['isActive'] is True


class TestDriverAccounts:
    """Tests for provisioning driver logins."""

    def test_create_driver_account(self, client, admin, auth_headers, make_drivers):
        driver = make_drivers(admin, 1)[0]

        response = post_json(client, '/api/auth/create-driver-account', {
            'driverId': driver.id, 'email': 'jo@example.com', 'password': 'password123'
        }, headers=auth_headers(admin))

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data['role'] == UserRole.DRIVER.value
        assert data['driverId'] == driver.id
        assert data['name'] == driver.name

    def test_driver_of_another_fleet(self, client, admin, make_user, auth_headers, make_drivers):
        driver = make_drivers(make_user(), 1)[0]

        response = post_json(client, '/api/auth/create-driver-account', {
            'driverId': driver.id, 'email': 'jo@example.com', 'password': 'password123'
        }, headers=auth_headers(admin))

        assert response.status_code == 404

    def test_account_already_exists(self, client, admin, make_user, auth_headers, make_drivers):
        driver = make_drivers(admin, 1)[0]
        make_user(role=UserRole.DRIVER.value, driver_id=driver.id)

        response = post_json(client, '/api/auth/create-driver-account', {
            'driverId': driver.id, 'email': 'jo@example.com', 'password': 'password123'
        }, headers=auth_headers(admin))

        assert response.status_code == 409

    def test_requires_admin(self, client, admin, make_user, auth_headers, make_drivers):
        driver = make_drivers(admin, 1)[0]
        driver_user = make_user(role=UserRole.DRIVER.value, driver_id=driver.id)

        response = post_json(client, '/api/auth/create-driver-account', {
            'driverId': driver.id, 'email': 'jo@example.com', 'password': 'password123'
        }, headers=auth_headers(driver_user))

        assert response.status_code == 403
        assert json.loads(response.data)['code'] == 'FORBIDDEN'


def test_deactivate_and_activate(client, db, admin, make_user, auth_headers, make_drivers):
    driver = make_drivers(admin, 1)[0]
    target = make_user(role=UserRole.DRIVER.value, driver_id=driver.id)

    response = client.put(f'/api/auth/deactivate/{target.id}', headers=auth_headers(admin))
    assert response.status_code == 200
    assert json.loads(response.data)['isActive'] is False

    response = client.put(f'/api/auth/activate/{target.id}', headers=auth_headers(admin))
    assert response.status_code == 200
    assert json.loads(response.data)['isActive'] is True


def test_deactivate_unknown_user(client, admin, auth_headers):
    response = client.put('/api/auth/deactivate/9999', headers=auth_headers(admin))
    assert response.status_code == 404


class TestAccountToggleScope:
    """Admins may only toggle driver accounts of their own fleet."""

    def test_other_fleet_driver_account(self, client, db, admin, make_user, auth_headers,
                                        make_drivers):
        other_admin = make_user()
        driver = make_drivers(other_admin, 1)[0]
        target = make_user(role=UserRole.DRIVER.value, driver_id=driver.id)

        response = client.put(f'/api/auth/deactivate/{target.id}', headers=auth_headers(admin))

        assert response.status_code == 404
        assert json.loads(response.data)['code'] == 'NOT_FOUND'
        db.session.expire_all()
        assert db.session.get(User, target.id).is_active is True

    def test_other_admin_account(self, client, db, admin, make_user, auth_headers):
        other_admin = make_user()

        response = client.put(
            f'/api/auth/deactivate/{other_admin.id}', headers=auth_headers(admin)
        )

        assert response.status_code == 404
        db.session.expire_all()
        assert db.session.get(User, other_admin.id).is_active is True

    def test_own_account(self, client, admin, auth_headers):
        response = client.put(f'/api/auth/deactivate/{admin.id}', headers=auth_headers(admin))
        assert response.status_code == 404

    def test_activate_other_fleet_driver_account(self, client, db, admin, make_user,
                                                 auth_headers, make_drivers):
        driver = make_drivers(make_user(), 1)[0]
        target = make_user(role=UserRole.DRIVER.value, driver_id=driver.id, is_active=False)

        response = client.put(f'/api/auth/activate/{target.id}', headers=auth_headers(admin))

        assert response.status_code == 404
        db.session.expire_all()
        assert db.session.get(User, target.id).is_active is False


class TestNonTextCredentials:
    """Credentials of the wrong JSON type are validation errors."""

    def test_register_numeric_email(self, client):
        response = post_json(client, '/api/auth/register-admin', {
            'email': 12345, 'password': 'password123'
        })

        assert response.status_code == 400
        assert json.loads(response.data)['code'] == 'VALIDATION_FAILED'

    def test_register_list_password(self, client):
        response = post_json(client, '/api/auth/register-admin', {
            'email': 'owner@example.com', 'password': ['password123']
        })

        assert response.status_code == 400
        assert json.loads(response.data)['code'] == 'VALIDATION_FAILED'

    def test_login_numeric_password(self, client, make_user):
        make_user(email='owner@example.com', password='password123')

        response = post_json(client, '/api/auth/login', {
            'email': 'owner@example.com', 'password': 12345678
        })

        assert response.status_code == 400
        assert json.loads(response.data)['code'] == 'VALIDATION_FAILED'

    def test_body_is_not_an_object(self, client):
        response = post_json(client, '/api/auth/login', ['owner@example.com', 'password123'])

        assert response.status_code == 400
        assert json.loads(response.data)['code'] == 'VALIDATION_FAILED'

    def test_driver_id_as_string(self, client, admin, auth_headers, make_drivers):
        driver = make_drivers(admin, 1)[0]

        response = post_json(client, '/api/auth/create-driver-account', {
            'driverId': str(driver.id), 'email': 'jo@example.com', 'password': 'password123'
        }, headers=auth_headers(admin))

        assert response.status_code == 400
        assert json.loads(response.data)['code'] == 'VALIDATION_FAILED'


class TestChangePassword:
    """Tests for changing the signed-in user's password."""

    def put_json(self, client, payload, headers):
        return client.put(
            '/api/auth/change-password', data=json.dumps(payload),
            content_type='application/json', headers=headers
        )

    def test_change_password(self, client, db, make_user, auth_headers):
        user = make_user(email='owner@example.com', password='password123')

        response = self.put_json(client, {
            'currentPassword': 'password123', 'newPassword': 'newsecret1'
        }, auth_headers(user))

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['message'] == 'Password changed successfully'
        assert data['access_token']
        assert data['refresh_token']

        old_login = post_json(client, '/api/auth/login', {
            'email': 'owner@example.com', 'password': 'password123'
        })
        assert old_login.status_code == 401
        new_login = post_json(client, '/api/auth/login', {
            'email': 'owner@example.com', 'password': 'newsecret1'
        })
        assert new_login.status_code == 200

    def test_issued_token_works(self, client, make_user, auth_headers):
        user = make_user(password='password123')

        data = json.loads(self.put_json(client, {
            'currentPassword': 'password123', 'newPassword': 'newsecret1'
        }, auth_headers(user)).data)
        response = client.get(
            '/api/auth/me', headers={'Authorization': f"Bearer {data['access_token']}"}
        )

        assert response.status_code == 200
        assert json.loads(response.data)['id'] == user.id

    def test_wrong_current_password(self, client, db, make_user, auth_headers):
        user = make_user(password='password123')

        response = self.put_json(client, {
            'currentPassword': 'wrongpassword', 'newPassword': 'newsecret1'
        }, auth_headers(user))

        assert response.status_code == 401
        assert 'Current password is incorrect' in json.loads(response.data)['message']
        db.session.expire_all()
        assert db.session.get(User, user.id).check_password('password123')

    def test_short_new_password(self, client, make_user, auth_headers):
        user = make_user(password='password123')

        response = self.put_json(client, {
            'currentPassword': 'password123', 'newPassword': '123'
        }, auth_headers(user))

        assert response.status_code == 400
        assert json.loads(response.data)['code'] == 'VALIDATION_FAILED'

    def test_missing_fields(self, client, make_user, auth_headers):
        user = make_user(password='password123')

        response = self.put_json(client, {'newPassword': 'newsecret1'}, auth_headers(user))

        assert response.status_code == 400
        assert 'Please provide current and new password' in json.loads(response.data)['message']

    def test_driver_account_can_change_password(self, client, admin, make_user, auth_headers,
                                                make_drivers):
        driver = make_drivers(admin, 1)[0]
        driver_user = make_user(role=UserRole.DRIVER.value, driver_id=driver.id)

        response = self.put_json(client, {
            'currentPassword': 'password123', 'newPassword': 'newsecret1'
        }, auth_headers(driver_user))

        assert response.status_code == 200

    def test_requires_token(self, client):
        response = self.put_json(client, {
            'currentPassword': 'password123', 'newPassword': 'newsecret1'
        }, None)
        assert response.status_code == 401
