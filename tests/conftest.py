"""
Fixtures for end-to-end flows driven through the HTTP API only.
"""
import pytest
from rest_framework.test import APIClient


PASSWORD = 'Pulse-Donor-2026'


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def signed_in(db):
    """
    Sign up an account and return an APIClient carrying its access token.

    Usage:
        hospital = signed_in('ops@hospital.org', 'hospital', organization_name='Springfield General')
    """
    def _signed_in(email, role, full_name='E2E User', **extra):
        client = APIClient()
        response = client.post('/api/v1/accounts/signup/', {
            'email': email,
            'password': PASSWORD,
            'full_name': full_name,
            'role': role,
            **extra,
        }, format='json')
        assert response.status_code == 201, response.data

        tokens = client.post('/api/auth/token/', {'email': email, 'password': PASSWORD}, format='json')
        assert tokens.status_code == 200, tokens.data
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens.data['access']}")
        client.user_id = response.data['id']
        return client

    return _signed_in
