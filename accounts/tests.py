from django.test import TestCase, Client, RequestFactory
from django.contrib.auth.models import User, AnonymousUser
from django.urls import reverse
from django.conf import settings
from django.http import HttpResponse
from django.utils.http import urlsafe_base64_encode
from django.utils.encoding import force_bytes
from django.contrib.messages import get_messages

from unittest.mock import patch, MagicMock

from accounts.backends import EmailOrUsernameBackend
from accounts.decorators import admin_required, get_user_role, is_portal_admin
from accounts.models import Profile, Role
from accounts.tasks import send_ses_email
from accounts.tokens import account_activation_token
from accounts.utils import get_ses_client


class AccountsTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.test_user = User.objects.create_user(username='testuser', password='password',
                                                 email='testuser@gmail.com')
        cls.inactive_user = User.objects.create_user(username='inactivetestuser', password='password2',
                                                     email="inactive_user@gmail.com")
        cls.inactive_user.is_active = False
        cls.inactive_user.save()

    def setUp(self):
        self.authenticated_client = Client()
        self.authenticated_client.login(username='testuser', password='password')
        self.unauthenticated_client = Client()

    def test_login_username_password(self):
        response = self.unauthenticated_client.post(reverse("login"), {
            "username": "testuser",
            "password": "password"
        })

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, reverse("home"))
        self.assertTrue("_auth_user_id" in self.unauthenticated_client.session)

    def test_login_email_password(self):
        response = self.unauthenticated_client.post(reverse("login"), {
            "username": "TestUser@gmail.com",
            "password": "password"
        })

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, reverse("home"))
        self.assertTrue("_auth_user_id" in self.unauthenticated_client.session)

    def test_login_wrong_password(self):
        response = self.unauthenticated_client.post(reverse("login"), {
            "username": "testuser",
            "password": "passworddd"
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.template_name[0], "registration/login.html")
        self.assertContains(response, "Please enter a correct username and password")
        self.assertFalse("_auth_user_id" in self.unauthenticated_client.session)

    def test_login_inactive_user(self):
        response = self.unauthenticated_client.post(reverse("login"), {
            "username": "inactivetestuser",
            "password": "password2"
        })

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Your account is inactive. Please contact support.")
        self.assertFalse("_auth_user_id" in self.unauthenticated_client.session)

    def test_home_redirects_student_to_dashboard(self):
        response = self.authenticated_client.get(reverse("home"))

        self.assertRedirects(response, reverse("student_dashboard"))

    def test_home_anonymous(self):
        response = self.unauthenticated_client.get(reverse("home"))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "homepage.html")

    @patch("accounts.views.send_ses_email.delay_on_commit")
    def test_signup_creates_inactive_student(self, send_email_pch):
        response = self.unauthenticated_client.post(reverse("signup"), {
            "username": "newuser",
            "email": "newuser@example.com",
            "full_name": "New User",
            "password1": "strongpassword123",
            "password2": "strongpassword123"
        })

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, reverse("login"))

        user = User.objects.get(username="newuser")
        self.assertEqual(user.email, "newuser@example.com")
        self.assertFalse(user.is_active)
        self.assertEqual(user.profile.role, Role.STUDENT)
        self.assertEqual(user.profile.full_name, "New User")

        send_email_pch.assert_called_once()
        args, kwargs = send_email_pch.call_args

        self.assertEqual(kwargs["to_email"], [user.email])
        self.assertEqual(kwargs["from_email"], settings.DEFAULT_FROM_EMAIL)
        self.assertEqual(kwargs["subject"], "Activate Your Account")

        uid = urlsafe_base64_encode(force_bytes(user.pk))
        self.assertIn(f"/accounts/activate/{uid}/", kwargs["body_text"])
        self.assertIn(f"/accounts/activate/{uid}/", kwargs["body_html"])
        self.assertIn("Please confirm your registration by clicking the link below", kwargs["body_html"])

    @patch("accounts.views.send_ses_email.delay")
    def test_signup_email_sent_after_commit(self, send_email_pch):
        with self.captureOnCommitCallbacks() as callbacks:
            response = self.unauthenticated_client.post(reverse("signup"), {
                "username": "committeduser",
                "email": "committeduser@example.com",
                "password1": "strongpassword123",
                "password2": "strongpassword123"
            })

            self.assertEqual(response.status_code, 302)
            send_email_pch.assert_not_called()

        self.assertEqual(len(callbacks), 1)
        callbacks[0]()

        args, kwargs = send_email_pch.call_args
        self.assertEqual(kwargs["to_email"], ["committeduser@example.com"])

    @patch("accounts.views.send_ses_email.delay_on_commit")
    def test_signup_password_mismatch(self, send_email_pch):
        response = self.unauthenticated_client.post(reverse("signup"), {
            "username": "user2",
            "email": "user2@example.com",
            "password1": "password123abc",
            "password2": "different123abc"
        })

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "registration/signup.html")
        self.assertFalse(User.objects.filter(username="user2").exists())
        send_email_pch.assert_not_called()

    @patch("accounts.views.send_ses_email.delay_on_commit")
    def test_signup_duplicate_email(self, send_email_pch):
        response = self.unauthenticated_client.post(reverse("signup"), {
            "username": "anotheruser",
            "email": "TESTUSER@gmail.com",
            "password1": "somepass123dgdgdgdg",
            "password2": "somepass123dgdgdgdg"
        })

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "A user with that email already exists.")
        send_email_pch.assert_not_called()

    @patch("accounts.views.send_ses_email.delay_on_commit")
    def test_resend_activation_inactive_user(self, send_email_pch):
        response = self.unauthenticated_client.post(reverse("resend_activation"), {
            "email": "inactive_user@gmail.com"
        })

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, reverse("login"))

        args, kwargs = send_email_pch.call_args
        self.assertEqual(kwargs["to_email"], [self.inactive_user.email])

        messages = list(get_messages(response.wsgi_request))
        self.assertTrue(any(m.message == "A new activation link has been sent to your email." for m in messages))

    @patch("accounts.views.send_ses_email.delay_on_commit")
    def test_resend_activation_active_user(self, send_email_pch):
        response = self.unauthenticated_client.post(reverse("resend_activation"), {
            "email": "testuser@gmail.com"
        })

        self.assertEqual(response.status_code, 302)
        send_email_pch.assert_not_called()
        messages = list(get_messages(response.wsgi_request))
        self.assertTrue(any(m.message == "This account is already active." for m in messages))

    @patch("accounts.views.send_ses_email.delay_on_commit")
    def test_resend_activation_unknown_email(self, send_email_pch):
        response = self.unauthenticated_client.post(reverse("resend_activation"), {
            "email": "nobody@gmail.com"
        })

        self.assertEqual(response.status_code, 302)
        send_email_pch.assert_not_called()
        messages = list(get_messages(response.wsgi_request))
        self.assertTrue(any(m.message == "No account found with that email address." for m in messages))

    @patch("accounts.views.send_ses_email.delay_on_commit")
    def test_resend_activation_shared_email(self, send_email_pch):
        User.objects.create_user(username='inactivetwin', password='password3',
                                 email="Inactive_User@gmail.com", is_active=False)

        response = self.unauthenticated_client.post(reverse("resend_activation"), {
            "email": "inactive_user@gmail.com"
        })

        self.assertEqual(response.status_code, 302)
        send_email_pch.assert_not_called()
        messages = list(get_messages(response.wsgi_request))
        self.assertTrue(any("more than one account" in m.message for m in messages))

    def test_valid_activation_token(self):
        uid = urlsafe_base64_encode(force_bytes(self.inactive_user.pk))
        token = account_activation_token.make_token(self.inactive_user)

        response = self.unauthenticated_client.get(reverse('activate', kwargs={'uidb64': uid, 'token': token}))

        self.inactive_user.refresh_from_db()
        self.assertRedirects(response, reverse('login'))
        self.assertTrue(self.inactive_user.is_active)

    def test_invalid_token(self):
        uid = urlsafe_base64_encode(force_bytes(self.inactive_user.pk))

        response = self.unauthenticated_client.get(reverse('activate', kwargs={'uidb64': uid,
                                                                               'token': 'invalid-token'}))

        self.inactive_user.refresh_from_db()
        self.assertFalse(self.inactive_user.is_active)
        self.assertTemplateUsed(response, 'registration/account_activation_invalid.html')

    def test_malformed_uid(self):
        token = account_activation_token.make_token(self.inactive_user)

        response = self.unauthenticated_client.get(reverse('activate', kwargs={'uidb64': 'not-a-valid-uid',
                                                                               'token': token}))

        self.assertTemplateUsed(response, 'registration/account_activation_invalid.html')


class SesTestCase(TestCase):

    @patch('edulearn.aws.settings')
    @patch('edulearn.aws.boto3.client')
    def test_ses_client_production_uses_default_credentials(self, mock_boto_client, mock_settings):
        mock_settings.DJANGO_ENV = "PRODUCTION"
        mock_settings.AWS_REGION = "us-east-1"
        mock_client_instance = MagicMock()
        mock_boto_client.return_value = mock_client_instance

        client = get_ses_client()

        mock_boto_client.assert_called_once_with('ses', region_name="us-east-1")
        self.assertEqual(client, mock_client_instance)

    @patch('edulearn.aws.settings')
    @patch('edulearn.aws.boto3.client')
    def test_ses_client_development_uses_explicit_credentials(self, mock_boto_client, mock_settings):
        mock_settings.DJANGO_ENV = "DEVELOPMENT"
        mock_settings.AWS_REGION = "us-west-2"
        mock_settings.AWS_ACCESS_KEY = "FAKEKEY"
        mock_settings.AWS_SECRET_ACCESS_KEY = "FAKESECRET"
        mock_client_instance = MagicMock()
        mock_boto_client.return_value = mock_client_instance

        client = get_ses_client()

        mock_boto_client.assert_called_once_with('ses',
                                                 aws_access_key_id="FAKEKEY",
                                                 aws_secret_access_key="FAKESECRET",
                                                 region_name="us-west-2")
        self.assertEqual(client, mock_client_instance)

    @patch('edulearn.aws.settings')
    @patch('edulearn.aws.boto3.client', side_effect=Exception("SES failure"))
    def test_ses_client_returns_none_on_exception(self, mock_boto_client, mock_settings):
        mock_settings.DJANGO_ENV = "DEVELOPMENT"
        mock_settings.AWS_REGION = "eu-west-1"
        mock_settings.AWS_ACCESS_KEY = "INVALID"
        mock_settings.AWS_SECRET_ACCESS_KEY = "INVALID"

        self.assertIsNone(get_ses_client())

    @patch('accounts.tasks.get_ses_client')
    def test_send_ses_email_builds_message(self, mock_get_client):
        mock_client = MagicMock()
        mock_client.send_email.return_value = {"MessageId": "abc"}
        mock_get_client.return_value = mock_client

        response = send_ses_email(to_email=["a@example.com"], subject="Hi", body_text="text", body_html="<p>html</p>")

        self.assertEqual(response, {"MessageId": "abc"})
        kwargs = mock_client.send_email.call_args.kwargs
        self.assertEqual(kwargs["Source"], settings.DEFAULT_FROM_EMAIL)
        self.assertEqual(kwargs["Destination"], {"ToAddresses": ["a@example.com"]})
        self.assertEqual(kwargs["Message"]["Body"]["Html"], {"Data": "<p>html</p>", "Charset": "UTF-8"})

    @patch('accounts.tasks.get_ses_client', return_value=None)
    def test_send_ses_email_without_client(self, mock_get_client):
        with self.assertRaises(Exception):
            send_ses_email(to_email=["a@example.com"], subject="Hi", body_text="text")


class EmailOrUsernameBackendTest(TestCase):

    def setUp(self):
        self.backend = EmailOrUsernameBackend()
        self.backend_user = User.objects.create_user(username="testuser", email="test@example.com",
                                                     password="securepass123")
        self.inactive_user = User.objects.create_user(username="testuser2", email="test_user_2@example.com",
                                                      password="kkkksskss", is_active=False)

    def test_authenticate_with_username(self):
        user = self.backend.authenticate(request=None, username="testuser", password="securepass123")
        self.assertEqual(user, self.backend_user)

    def test_authenticate_with_email(self):
        user = self.backend.authenticate(request=None, username="Test@Example.com", password="securepass123")
        self.assertEqual(user, self.backend_user)

    def test_authenticate_with_wrong_password(self):
        self.assertIsNone(self.backend.authenticate(request=None, username="testuser", password="wrongpassword"))

    def test_authenticate_unknown_user(self):
        self.assertIsNone(self.backend.authenticate(request=None, username="doesnotexist", password="whatever"))

    def test_authenticate_inactive_user_is_returned_for_login_form(self):
        user = self.backend.authenticate(request=None, username="test_user_2@example.com", password="kkkksskss")
        self.assertEqual(user, self.inactive_user)

    def test_get_user(self):
        self.assertEqual(self.backend.get_user(self.backend_user.id), self.backend_user)
        self.assertIsNone(self.backend.get_user(9999))
        self.assertIsNone(self.backend.get_user(self.inactive_user.id))

    def test_authenticate_shared_email_is_ambiguous(self):
        User.objects.create_user(username="testuser3", email="TEST@example.com", password="securepass123")

        self.assertIsNone(self.backend.authenticate(request=None, username="test@example.com",
                                                    password="securepass123"))
        self.assertEqual(self.backend.authenticate(request=None, username="testuser", password="securepass123"),
                         self.backend_user)


class RoleTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.student = User.objects.create_user(username='student', password='password')
        cls.profile_admin = User.objects.create_user(username='profileadmin', password='password')
        Profile.objects.create(user=cls.profile_admin, role=Role.ADMIN)
        cls.staff_user = User.objects.create_user(username='staff', password='password', is_staff=True)

    def setUp(self):
        self.factory = RequestFactory()

        @admin_required
        def protected_view(request):
            return HttpResponse("ok")

        self.protected_view = protected_view

    def test_get_user_role(self):
        self.assertIsNone(get_user_role(AnonymousUser()))
        self.assertEqual(get_user_role(self.student), Role.STUDENT)
        self.assertEqual(get_user_role(self.profile_admin), Role.ADMIN)
        self.assertEqual(get_user_role(self.staff_user), Role.ADMIN)

    def test_missing_profile_is_created_as_student(self):
        self.assertFalse(Profile.objects.filter(user=self.student).exists())

        get_user_role(self.student)

        self.assertEqual(Profile.objects.get(user=self.student).role, Role.STUDENT)

    def test_admin_required(self):
        request = self.factory.get("/")

        request.user = AnonymousUser()
        response = self.protected_view(request)
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, reverse("login"))

        request.user = self.student
        self.assertEqual(self.protected_view(request).status_code, 403)

        request.user = self.profile_admin
        self.assertEqual(self.protected_view(request).status_code, 200)
        self.assertTrue(is_portal_admin(self.profile_admin))

    def test_admin_dashboard_access(self):
        client = Client()
        client.login(username='student', password='password')
        self.assertEqual(client.get(reverse("admin_dashboard")).status_code, 403)

        client.login(username='profileadmin', password='password')
        response = client.get(reverse("admin_dashboard"))
        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "dashboard/admin_dashboard.html")

    def test_home_redirects_admin_to_admin_dashboard(self):
        client = Client()
        client.login(username='staff', password='password')

        self.assertRedirects(client.get(reverse("home")), reverse("admin_dashboard"))

