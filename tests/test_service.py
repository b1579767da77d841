"""End-to-end tests for the user directory HTTP API."""

from __future__ import annotations

import unittest
from unittest import mock

from fastapi.testclient import TestClient

from user_api.repository import UserRepository
from user_api.validation import check_user_fields
from user_api.service import create_app

AUTH = {"Authorization": "Bearer thisIsASecretToken"}


class UserServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repository = UserRepository()
        self.app = create_app(repository=self.repository)
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        self.client.close()

    def _create(self, name: str, email: str):
        return self.client.post("/users", headers=AUTH, json={"name": name, "email": email})

    def test_root_is_public(self) -> None:
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.text, "Welcome to the User Management API!")

    def test_create_returns_record_and_location(self) -> None:
        response = self._create("Ann", "ann@x.com")

        self.assertEqual(response.status_code, 201, response.text)
        self.assertEqual(response.json(), {"id": 1, "name": "Ann", "email": "ann@x.com"})
        self.assertEqual(response.headers["location"], "/users/1")

    def test_create_ignores_supplied_id(self) -> None:
        response = self.client.post(
            "/users",
            headers=AUTH,
            json={"id": 42, "name": "Ann", "email": "ann@x.com"},
        )
        self.assertEqual(response.status_code, 201, response.text)
        self.assertEqual(response.json()["id"], 1)

    def test_duplicate_email_is_rejected(self) -> None:
        self._create("Ann", "ann@x.com")
        response = self._create("Bob", "ann@x.com")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), "Email already exists.")
        self.assertEqual(self.repository.count(), 1)

    def test_create_validation_order(self) -> None:
        cases = [
            ({"name": "", "email": ""}, "Name is required."),
            ({"email": "ann@x.com"}, "Name is required."),
            ({"name": "Ann", "email": "   "}, "Email is required."),
            ({"name": "Ann"}, "Email is required."),
            ({"name": "Ann", "email": "ann.x.com"}, "Invalid email format."),
        ]
        for body, message in cases:
            with self.subTest(body=body):
                response = self.client.post("/users", headers=AUTH, json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json(), message)
        self.assertEqual(self.repository.count(), 0)

    def test_round_trip_get(self) -> None:
        created = self._create("Ann", "ann@").json()

        response = self.client.get(f"/users/{created['id']}", headers=AUTH)

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json(), created)

    def test_list_users_in_insertion_order(self) -> None:
        self._create("Ann", "ann@x.com")
        self._create("Bob", "bob@x.com")

        response = self.client.get("/users", headers=AUTH)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            [
                {"id": 1, "name": "Ann", "email": "ann@x.com"},
                {"id": 2, "name": "Bob", "email": "bob@x.com"},
            ],
        )

    def test_get_missing_user(self) -> None:
        response = self.client.get("/users/99", headers=AUTH)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), "User not found.")

    def test_non_integer_id_rejected_by_router(self) -> None:
        response = self.client.get("/users/abc", headers=AUTH)
        self.assertEqual(response.status_code, 422)

    def test_update_replaces_fields(self) -> None:
        self._create("Ann", "ann@x.com")

        response = self.client.put(
            "/users/1",
            headers=AUTH,
            json={"id": 5, "name": "Annie", "email": "annie@x.com"},
        )

        self.assertEqual(response.status_code, 204, response.text)
        self.assertEqual(response.content, b"")
        self.assertEqual(
            self.client.get("/users/1", headers=AUTH).json(),
            {"id": 1, "name": "Annie", "email": "annie@x.com"},
        )

    def test_update_with_blank_name_leaves_record_unchanged(self) -> None:
        self._create("Ann", "ann@x.com")

        response = self.client.put("/users/1", headers=AUTH, json={"name": "", "email": "ann@x.com"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), "Name is required.")
        self.assertEqual(
            self.client.get("/users/1", headers=AUTH).json(),
            {"id": 1, "name": "Ann", "email": "ann@x.com"},
        )

    def test_update_with_invalid_email_leaves_record_unchanged(self) -> None:
        self._create("Ann", "ann@x.com")
        cases = [
            ({"name": "Ann", "email": ""}, "Email is required."),
            ({"name": "Ann", "email": "   "}, "Email is required."),
            ({"name": "Ann"}, "Email is required."),
            ({"name": "Ann", "email": "ann.x.com"}, "Invalid email format."),
            ({"name": " ", "email": "ann.x.com"}, "Name is required."),
        ]
        for body, message in cases:
            with self.subTest(body=body):
                response = self.client.put("/users/1", headers=AUTH, json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json(), message)
                self.assertEqual(
                    self.client.get("/users/1", headers=AUTH).json(),
                    {"id": 1, "name": "Ann", "email": "ann@x.com"},
                )

    def test_create_validates_fields_once(self) -> None:
        with mock.patch(
            "user_api.repository.check_user_fields", wraps=check_user_fields
        ) as checker:
            response = self._create("Ann", "ann@x.com")

        self.assertEqual(response.status_code, 201, response.text)
        checker.assert_called_once_with("Ann", "ann@x.com")

    def test_update_email_in_use_by_another_user(self) -> None:
        self._create("Ann", "ann@x.com")
        self._create("Bob", "bob@x.com")

        response = self.client.put("/users/2", headers=AUTH, json={"name": "Bob", "email": "ann@x.com"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), "Email already in use by another user.")

    def test_update_missing_user(self) -> None:
        response = self.client.put("/users/3", headers=AUTH, json={"name": "", "email": ""})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), "User not found.")

    def test_delete_then_get_returns_not_found(self) -> None:
        self._create("Ann", "ann@x.com")

        deleted = self.client.delete("/users/1", headers=AUTH)
        self.assertEqual(deleted.status_code, 204)
        self.assertEqual(deleted.content, b"")

        self.assertEqual(self.client.get("/users/1", headers=AUTH).status_code, 404)
        again = self.client.delete("/users/1", headers=AUTH)
        self.assertEqual(again.status_code, 404)
        self.assertEqual(again.json(), "User not found.")

    def test_missing_authorization_header(self) -> None:
        response = self.client.get("/users")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Missing Authorization header."})

    def test_invalid_token(self) -> None:
        for value in ("Bearer wrong", "thisIsASecretToken", "bearer thisIsASecretToken", ""):
            with self.subTest(value=value):
                response = self.client.get("/users", headers={"Authorization": value})
                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.json(), {"error": "Invalid token."})

    def test_rejected_create_never_reaches_repository(self) -> None:
        response = self.client.post(
            "/users",
            headers={"Authorization": "Bearer nope"},
            json={"name": "Ann", "email": "ann@x.com"},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.repository.count(), 0)

    def test_unknown_path_requires_authentication_first(self) -> None:
        self.assertEqual(self.client.get("/missing").status_code, 401)
        self.assertEqual(self.client.get("/missing", headers=AUTH).status_code, 404)

    def test_custom_token(self) -> None:
        app = create_app(repository=UserRepository(), api_token="another-token")
        with TestClient(app) as client:
            self.assertEqual(client.get("/users", headers=AUTH).status_code, 401)
            ok = client.get("/users", headers={"Authorization": "Bearer another-token"})
            self.assertEqual(ok.status_code, 200, ok.text)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
