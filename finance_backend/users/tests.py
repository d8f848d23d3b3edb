# users/tests.py

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

User = get_user_model()

PASSWORD = "S3cure-pass-123"


class AuthFlowTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_derives_username_from_email(self):
        res = self.client.post(
            reverse("users:register"),
            {"email": "jane@example.com", "password": PASSWORD},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["user"]["username"], "jane")

    def test_login_with_email_or_username(self):
        User.objects.create_user(email="jane@example.com", username="janed", password=PASSWORD)

        for identifier in ("jane@example.com", "JANED"):
            with self.subTest(identifier=identifier):
                res = self.client.post(
                    reverse("users:login"),
                    {"identifier": identifier, "password": PASSWORD},
                    format="json",
                )
                self.assertEqual(res.status_code, status.HTTP_200_OK)
                self.assertIn("access", res.data)
                self.assertEqual(res.data["user"]["email"], "jane@example.com")

    def test_login_with_wrong_password_is_401(self):
        User.objects.create_user(email="jane@example.com", password=PASSWORD)
        res = self.client.post(
            reverse("users:login"),
            {"identifier": "jane@example.com", "password": "nope"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_with_jwt(self):
        User.objects.create_user(email="jane@example.com", password=PASSWORD)
        login = self.client.post(
            reverse("users:login"),
            {"identifier": "jane@example.com", "password": PASSWORD},
            format="json",
        )

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")
        res = self.client.get(reverse("users:me"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["email"], "jane@example.com")

    def test_refresh_issues_new_access_token(self):
        User.objects.create_user(email="jane@example.com", password=PASSWORD)
        login = self.client.post(
            reverse("users:login"),
            {"identifier": "jane@example.com", "password": PASSWORD},
            format="json",
        )

        res = self.client.post(
            reverse("users:jwt-refresh"),
            {"refresh": login.data["refresh"]},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn("access", res.data)
