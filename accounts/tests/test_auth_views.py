"""
Tests for registration, login, two factor challenge and logout.
"""
from django.core import mail
from django.urls import reverse
from rest_framework import status

from accounts.models import User
from accounts.services import auth_service

from .base import PASSWORD, AccountsAPITestCase


class RegisterViewTest(AccountsAPITestCase):
    """Test account registration."""

    def payload(self, **overrides):
        data = {
            'name': 'Ada Lovelace',
            'email': 'Ada@Example.com',
            'password': PASSWORD,
            'password_confirmation': PASSWORD,
        }
        data.update(overrides)
        return data

    def test_register(self):
        response = self.client.post(reverse('register'), self.payload(language='fr-CA'))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email='ada@example.com')
        self.assertEqual(user.language, 'fr')
        self.assertFalse(user.has_verified_email())
        self.assertEqual(response.data['email'], 'ada@example.com')

        # Logged in and sent a verification link
        self.assertEqual(self.client.get(reverse('auth_me')).data['user']['id'], str(user.pk))
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('/api/verify-email/', mail.outbox[0].body)

    def test_register_unsupported_language_falls_back(self):
        self.client.post(reverse('register'), self.payload(language='de'))
        self.assertEqual(User.objects.get().language, 'en')

    def test_register_duplicate_email(self):
        self.create_user(email='ada@example.com')

        response = self.client.post(reverse('register'), self.payload())

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['errors'])

    def test_register_password_confirmation_mismatch(self):
        response = self.client.post(reverse('register'), self.payload(password_confirmation='different-pass'))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data['errors'])

    def test_register_short_password(self):
        response = self.client.post(
            reverse('register'), self.payload(password='short', password_confirmation='short')
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data['errors'])

    def test_register_requires_guest(self):
        self.client.force_login(self.create_user())

        response = self.client.post(reverse('register'), self.payload(email='other@example.com'))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class LoginViewTest(AccountsAPITestCase):
    """Test email and password login."""

    def setUp(self):
        super().setUp()
        self.user = self.create_user()

    def test_login(self):
        response = self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': PASSWORD})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], str(self.user.pk))
        self.assertTrue(self.client.get(reverse('auth_me')).data['user'])

    def test_login_is_case_insensitive(self):
        response = self.client.post(reverse('login'), {'email': 'ADA@example.com', 'password': PASSWORD})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_without_remember_expires_at_browser_close(self):
        self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': PASSWORD})
        self.assertTrue(self.client.session.get_expire_at_browser_close())

    def test_login_with_remember(self):
        self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': PASSWORD, 'remember': True})
        self.assertFalse(self.client.session.get_expire_at_browser_close())

    def test_invalid_credentials(self):
        response = self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': 'wrong-password'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            str(response.data['errors']['email'][0]),
            'These credentials do not match our records.'
        )
        self.assertIsNone(self.client.get(reverse('auth_me')).data['user'])

    def test_failed_login_is_logged(self):
        with self.assertLogs('accounts', level='WARNING') as logs:
            self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': 'wrong-password'})

        self.assertIn('Failed login attempt for ada@example.com', logs.output[0])

    def test_lockout_is_logged(self):
        for _ in range(5):
            self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': 'wrong-password'})

        with self.assertLogs('accounts', level='WARNING') as logs:
            self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': PASSWORD})

        self.assertIn('Login locked out', logs.output[0])

    def test_login_is_rate_limited(self):
        for _ in range(5):
            self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': 'wrong-password'})

        response = self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': PASSWORD})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Too many login attempts', str(response.data['errors']['email'][0]))
        self.assertIn('seconds', str(response.data['errors']['email'][0]))

    def test_successful_login_clears_failed_attempts(self):
        for _ in range(4):
            self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': 'wrong-password'})

        self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': PASSWORD})
        self.client.post(reverse('logout'))

        for _ in range(4):
            self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': 'wrong-password'})

        response = self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': PASSWORD})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_logout(self):
        self.client.post(reverse('login'), {'email': 'ada@example.com', 'password': PASSWORD})

        response = self.client.post(reverse('logout'))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertIsNone(self.client.get(reverse('auth_me')).data['user'])

    def test_me_lists_supported_locales(self):
        response = self.client.get(reverse('auth_me'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['supported_locales']['en']['regional'], 'en-GB')
        self.assertIn('fr', response.data['supported_locales'])


class TwoFactorChallengeTest(AccountsAPITestCase):
    """Test the second login step."""

    def setUp(self):
        super().setUp()
        self.user = self.enable_two_factor(self.create_user())

    def start_challenge(self, remember=False):
        return self.client.post(
            reverse('login'),
            {'email': 'ada@example.com', 'password': PASSWORD, 'remember': remember}
        )

    def test_login_starts_challenge(self):
        response = self.start_challenge()

        self.assertEqual(response.data, {'two_factor': True})
        self.assertEqual(self.client.session[auth_service.SESSION_LOGIN_ID], str(self.user.pk))
        self.assertIsNone(self.client.get(reverse('auth_me')).data['user'])

    def test_challenge_status(self):
        response = self.client.get(reverse('two_factor_login'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.start_challenge()
        response = self.client.get(reverse('two_factor_login'))
        self.assertEqual(response.data, {'two_factor': True})

    def test_complete_with_code(self):
        self.start_challenge(remember=True)

        response = self.client.post(reverse('two_factor_login'), {'code': self.current_code(self.user)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], str(self.user.pk))
        self.assertNotIn(auth_service.SESSION_LOGIN_ID, self.client.session)
        self.assertFalse(self.client.session.get_expire_at_browser_close())

    def test_code_cannot_be_replayed(self):
        code = self.current_code(self.user)
        self.start_challenge()
        self.client.post(reverse('two_factor_login'), {'code': code})
        self.client.post(reverse('logout'))

        self.start_challenge()
        response = self.client.post(reverse('two_factor_login'), {'code': code})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('code', response.data['errors'])

    def test_invalid_code(self):
        self.start_challenge()
        wrong = '000000' if self.current_code(self.user) != '000000' else '111111'

        with self.assertLogs('accounts', level='WARNING') as logs:
            response = self.client.post(reverse('two_factor_login'), {'code': wrong})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            str(response.data['errors']['code'][0]),
            'The provided two factor authentication code was invalid.'
        )
        self.assertIn(f'Invalid two factor code for user {self.user.pk}', logs.output[0])

    def test_complete_with_recovery_code_replaces_it(self):
        recovery_code = self.user.two_factor_recovery_codes[0]
        self.start_challenge()

        response = self.client.post(
            reverse('two_factor_login'), {'code': recovery_code, 'is_recovery': True}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertNotIn(recovery_code, self.user.two_factor_recovery_codes)
        self.assertEqual(len(self.user.two_factor_recovery_codes), 8)

    def test_challenge_without_pending_login(self):
        response = self.client.post(reverse('two_factor_login'), {'code': '123456'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('code', response.data['errors'])

    def test_challenge_is_rate_limited(self):
        self.start_challenge()
        for _ in range(5):
            self.client.post(reverse('two_factor_login'), {'code': 'not-a-code'})

        response = self.client.post(reverse('two_factor_login'), {'code': self.current_code(self.user)})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Too many login attempts', str(response.data['errors']['code'][0]))
