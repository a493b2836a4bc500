"""
Tests for account registration, login and bearer token authentication.
"""

from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase
from rest_framework import status


class RegisterTests(APITestCase):
    """Tests for POST /api/user/register/."""

    def setUp(self):
        cache.clear()

    def test_register_returns_token(self):
        response = self.client.post('/api/user/register/', {
            'name': 'alice',
            'email': 'alice@example.com',
            'password': 'correct horse'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'alice')
        self.assertEqual(response.data['email'], 'alice@example.com')
        self.assertFalse(response.data['isAdmin'])

        user = get_user_model().objects.get(username='alice')
        self.assertEqual(response.data['token'], Token.objects.get(user=user).key)

    def test_password_is_hashed(self):
        self.client.post('/api/user/register/', {
            'name': 'alice',
            'email': 'alice@example.com',
            'password': 'correct horse'
        }, format='json')

        user = get_user_model().objects.get(username='alice')
        self.assertNotEqual(user.password, 'correct horse')
        self.assertTrue(user.check_password('correct horse'))

    def test_register_missing_fields(self):
        response = self.client.post('/api/user/register/', {'name': 'alice'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], 'ERR_MISSING_FIELD')

    def test_duplicate_email(self):
        get_user_model().objects.create_user('someone', 'alice@example.com', 'pw')

        response = self.client.post('/api/user/register/', {
            'name': 'alice',
            'email': 'alice@example.com',
            'password': 'pw'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'User already exists')

    def test_duplicate_name(self):
        get_user_model().objects.create_user('alice', 'other@example.com', 'pw')

        response = self.client.post('/api/user/register/', {
            'name': 'alice',
            'email': 'alice@example.com',
            'password': 'pw'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], 'ERR_USER_EXISTS')
        self.assertIn('Name already exists', response.data['message'])


class LoginTests(APITestCase):
    """Tests for POST /api/user/login/."""

    def setUp(self):
        cache.clear()
        self.user = get_user_model().objects.create_user(
            'alice', 'alice@example.com', 'correct horse'
        )

    def test_login_returns_token(self):
        response = self.client.post('/api/user/login/', {
            'name': 'alice',
            'password': 'correct horse'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.user.pk)
        self.assertEqual(response.data['token'], Token.objects.get(user=self.user).key)

    def test_login_reuses_token(self):
        first = self.client.post('/api/user/login/', {
            'name': 'alice', 'password': 'correct horse'
        }, format='json')
        second = self.client.post('/api/user/login/', {
            'name': 'alice', 'password': 'correct horse'
        }, format='json')

        self.assertEqual(first.data['token'], second.data['token'])

    def test_wrong_password(self):
        response = self.client.post('/api/user/login/', {
            'name': 'alice',
            'password': 'wrong'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error_code'], 'ERR_INVALID_CREDENTIALS')

    def test_token_authenticates_task_endpoints(self):
        """The returned token works as a Bearer credential."""
        token = self.client.post('/api/user/login/', {
            'name': 'alice', 'password': 'correct horse'
        }, format='json').data['token']

        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get('/api/tasks/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_invalid_token_rejected(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = self.client.get('/api/tasks/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
