from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

User = get_user_model()


class UserRegistrationTest(APITestCase):
    """
    Test suite for the user registration endpoint.
    """

    def setUp(self):
        """
        Define the URL for the registration endpoint.
        """
        self.register_url = reverse("auth_register")

    def test_user_registration_success(self):
        """
        Ensure we can create a new user account with valid data.
        """
        data = {
            "email": "testuser@example.com",
            "full_name": "Test User",
            "password1": "some-strong-password-123",
            "password2": "some-strong-password-123",
        }
        response = self.client.post(self.register_url, data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.count(), 1)

        user = User.objects.get()
        self.assertEqual(user.email, data["email"])
        self.assertEqual(user.full_name, data["full_name"])
        self.assertEqual(user.username, "testuser")
        self.assertEqual(user.role, User.Role.USER)
        self.assertTrue(user.check_password(data["password1"]))
        self.assertFalse(user.is_staff)
        self.assertNotIn("password1", response.data)

    def test_user_registration_password_mismatch(self):
        """
        Ensure registration fails if the two password fields do not match.
        """
        data = {
            "email": "testuser@example.com",
            "full_name": "Test User",
            "password1": "some-strong-password-123",
            "password2": "a-different-password",
        }
        response = self.client.post(self.register_url, data, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(User.objects.count(), 0)
        self.assertIn("password", response.data)
        self.assertEqual(response.data["password"][0], "Password fields didn't match.")

    def test_user_registration_email_already_exists(self):
        """
        Ensure registration fails if the email is already taken.
        """
        User.objects.create_user(email="testuser@example.com", full_name="Existing User", password="password123")

        data = {
            "email": "testuser@example.com",
            "full_name": "New User",
            "password1": "some-strong-password-123",
            "password2": "some-strong-password-123",
        }
        response = self.client.post(self.register_url, data, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(User.objects.count(), 1)
        self.assertIn("email", response.data)

    def test_registration_ignores_role_in_payload(self):
        data = {
            "email": "sneaky@example.com",
            "full_name": "Sneaky",
            "role": "admin",
            "password1": "some-strong-password-123",
            "password2": "some-strong-password-123",
        }
        response = self.client.post(self.register_url, data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get().role, User.Role.USER)


class UserManagerTest(APITestCase):

    def test_duplicate_local_part_gets_unique_username(self):
        a = User.objects.create_user(email="sam@one.example", password="x")
        b = User.objects.create_user(email="sam@two.example", password="x")
        self.assertEqual(a.username, "sam")
        self.assertNotEqual(b.username, "sam")
        self.assertTrue(b.username.startswith("sam_"))

    def test_superuser_is_admin_role(self):
        admin = User.objects.create_superuser(email="root@example.com", password="x")
        self.assertTrue(admin.is_staff)
        self.assertEqual(admin.role, User.Role.ADMIN)


class MeAndDirectoryTest(APITestCase):

    def setUp(self):
        self.requester = User.objects.create_user(email="req@example.com", password="x", full_name="Rita Requester")
        self.tech = User.objects.create_user(email="tech@example.com", password="x", role=User.Role.TECHNICIAN)
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.Role.ADMIN)

    def test_me_requires_authentication(self):
        response = self.client.get(reverse("auth_me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_returns_profile_and_cannot_change_role(self):
        self.client.force_authenticate(self.requester)
        response = self.client.patch(reverse("auth_me"), {"department": "Finance", "role": "admin"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["department"], "Finance")
        self.requester.refresh_from_db()
        self.assertEqual(self.requester.role, User.Role.USER)

    def test_directory_hidden_from_plain_users(self):
        self.client.force_authenticate(self.requester)
        response = self.client.get("/api/users")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_directory_lists_for_technicians_with_role_filter(self):
        self.client.force_authenticate(self.tech)
        response = self.client.get("/api/users", {"role": "technician"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["email"], "tech@example.com")

    def test_only_admin_can_change_role(self):
        url = f"/api/users/{self.requester.id}"

        self.client.force_authenticate(self.tech)
        self.assertEqual(self.client.patch(url, {"role": "technician"}, format="json").status_code,
                         status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.patch(url, {"role": "technician"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.requester.refresh_from_db()
        self.assertEqual(self.requester.role, User.Role.TECHNICIAN)
