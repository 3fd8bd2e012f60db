"""
Tests for authentication functionality.

Tests login, logout, session status and the admin_required decorator.
"""

from franchise_auction.auth import check_admin_credentials, hash_password, verify_password


class TestLogin:
    """Tests for the login endpoint."""

    def test_login_with_valid_credentials(self, client):
        response = client.post('/api/auth/login', json={
            'username': 'admin',
            'password': 'test-password'  # From TestingConfig
        })

        assert response.status_code == 200
        assert response.get_json()['is_admin'] is True
        with client.session_transaction() as sess:
            assert sess.get('is_admin') is True

    def test_login_with_invalid_password(self, client):
        response = client.post('/api/auth/login', json={
            'username': 'admin',
            'password': 'wrongpassword'
        })

        assert response.status_code == 401
        with client.session_transaction() as sess:
            assert sess.get('is_admin') is not True

    def test_login_with_invalid_username(self, client):
        response = client.post('/api/auth/login', json={
            'username': 'wronguser',
            'password': 'test-password'
        })
        assert response.status_code == 401

    def test_login_requires_fields(self, client):
        response = client.post('/api/auth/login', json={'username': 'admin'})
        assert response.status_code == 400

    def test_login_with_password_hash(self, client, app):
        app.config['ADMIN_PASSWORD_HASH'] = hash_password('hashed-secret')

        response = client.post('/api/auth/login', json={
            'username': 'admin',
            'password': 'hashed-secret'
        })
        assert response.status_code == 200

        # The plaintext password is ignored once a hash is configured
        response = client.post('/api/auth/login', json={
            'username': 'admin',
            'password': 'test-password'
        })
        assert response.status_code == 401


class TestSession:
    """Tests for logout and session status."""

    def test_session_status(self, client, auth_client):
        assert auth_client.get('/api/auth/session').get_json()['is_admin'] is True

    def test_logout(self, auth_client):
        response = auth_client.post('/api/auth/logout')
        assert response.status_code == 200

        assert auth_client.get('/api/auth/session').get_json()['is_admin'] is False

    def test_csrf_token(self, client):
        data = client.get('/api/auth/csrf-token').get_json()
        assert data['success'] is True
        assert data['csrf_token']


class TestAdminRequired:
    """Tests for the admin_required decorator."""

    def test_admin_route_rejects_anonymous(self, client):
        response = client.post('/api/teams', json={'name': 'Sneaky'})
        assert response.status_code == 403
        assert response.get_json()['success'] is False

    def test_admin_route_allows_admin(self, auth_client):
        response = auth_client.post('/api/teams', json={'name': 'Allowed'})
        assert response.status_code == 201


class TestPasswordHelpers:

    def test_hash_round_trip(self):
        hashed = hash_password('secret')
        assert verify_password('secret', hashed)
        assert not verify_password('other', hashed)
        assert not verify_password('secret', 'not-a-hash')

    def test_check_admin_credentials(self, app):
        assert check_admin_credentials('admin', 'test-password')
        assert not check_admin_credentials('admin', '')
        assert not check_admin_credentials('', 'test-password')

    def test_hash_password_command(self, app):
        result = app.test_cli_runner().invoke(args=['hash-password'], input='cli-secret\ncli-secret\n')

        assert result.exit_code == 0
        hashed = result.output.strip().splitlines()[-1]
        assert verify_password('cli-secret', hashed)
