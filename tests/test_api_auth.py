"""API tests for /auth endpoints and the session gate on protected routes."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from app.api.v1.auth import auth_http_error
from app.core.security import TokenConfig, issue_access_token
from app.models import User
from app.services.auth import REFRESH_TOKEN_INVALID, VALIDATION_ERROR, AuthServiceError
from support import ApiTestMixin


class TestAuthFlow(ApiTestMixin, unittest.TestCase):
    """register -> duplicate -> bad login -> login -> refresh -> replay of the rotated token."""

    def test_full_session_lifecycle(self) -> None:
        res = self.register()
        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertEqual(body["name"], "A")
        self.assertEqual(body["email"], "a@x.com")
        self.assertEqual(body["role"], "user")
        self.assertNotIn("password_hash", body)
        self.assertNotIn("refresh_token", body)

        res = self.register()
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json()["detail"]["code"], "email_taken")

        res = self.login(password="wrong")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["detail"]["code"], "invalid_credentials")

        res = self.login()
        self.assertEqual(res.status_code, 200)
        tokens = res.json()
        self.assertEqual(tokens["token_type"], "bearer")
        self.assertEqual(tokens["user"]["email"], "a@x.com")
        user_id = tokens["user"]["id"]

        # The client only calls refresh once its access token has expired.
        config = TokenConfig.from_settings(self.settings)
        expired_access = issue_access_token(
            user_id, config, now=datetime.now(UTC) - timedelta(hours=1)
        )
        res = self.client.post(
            self.api("/auth/refresh"),
            json={"refresh_token": tokens["refresh_token"]},
            headers={self.settings.ACCESS_TOKEN_HEADER: expired_access},
        )
        self.assertEqual(res.status_code, 200)
        refreshed = res.json()
        self.assertNotEqual(refreshed["refresh_token"], tokens["refresh_token"])

        profile = self.client.get(
            self.api("/users/profile"),
            headers={self.settings.ACCESS_TOKEN_HEADER: refreshed["access_token"]},
        )
        self.assertEqual(profile.status_code, 200)
        self.assertEqual(profile.json()["id"], user_id)

        res = self.client.post(
            self.api("/auth/refresh"),
            json={"refresh_token": tokens["refresh_token"]},
            headers={self.settings.ACCESS_TOKEN_HEADER: expired_access},
        )
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["detail"]["code"], "refresh_token_invalid")

    def test_unknown_email_and_wrong_password_give_same_response(self) -> None:
        self.register()
        wrong = self.login(password="wrong")
        unknown = self.login(email="nobody@x.com")
        self.assertEqual(wrong.status_code, unknown.status_code)
        self.assertEqual(wrong.json(), unknown.json())

    def test_register_requires_all_fields(self) -> None:
        res = self.client.post(
            self.api("/auth/register"), json={"email": "a@x.com", "password": "pw1"}
        )
        self.assertEqual(res.status_code, 422)
        res = self.client.post(
            self.api("/auth/register"),
            json={"name": "A", "email": "not-an-email", "password": "pw1"},
        )
        self.assertEqual(res.status_code, 422)

    def test_register_normalizes_email(self) -> None:
        res = self.register(email="  A@X.COM ")
        self.assertEqual(res.json()["email"], "a@x.com")
        self.assertEqual(self.register(email="a@x.com").status_code, 409)

    def test_refresh_without_access_token_is_validation_error(self) -> None:
        self.register()
        tokens = self.login().json()
        res = self.client.post(
            self.api("/auth/refresh"), json={"refresh_token": tokens["refresh_token"]}
        )
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.json()["detail"]["code"], "validation_error")

    def test_refresh_accepts_bearer_prefix(self) -> None:
        self.register()
        tokens = self.login().json()
        res = self.client.post(
            self.api("/auth/refresh"),
            json={"refresh_token": tokens["refresh_token"]},
            headers={self.settings.ACCESS_TOKEN_HEADER: f"Bearer {tokens['access_token']}"},
        )
        self.assertEqual(res.status_code, 200)

    def test_logout_ends_refresh_lineage(self) -> None:
        self.register()
        tokens = self.login().json()
        headers = {self.settings.ACCESS_TOKEN_HEADER: tokens["access_token"]}
        res = self.client.post(self.api("/auth/logout"), headers=headers)
        self.assertEqual(res.status_code, 204)
        res = self.client.post(
            self.api("/auth/refresh"),
            json={"refresh_token": tokens["refresh_token"]},
            headers=headers,
        )
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["detail"]["code"], "refresh_token_invalid")


class TestSessionGate(ApiTestMixin, unittest.TestCase):
    def test_absent_malformed_and_expired_tokens_rejected_identically(self) -> None:
        self.register()
        user_id = self.login().json()["user"]["id"]
        config = TokenConfig.from_settings(self.settings)
        expired = issue_access_token(
            user_id, config, now=datetime.now(UTC) - timedelta(hours=1)
        )
        header = self.settings.ACCESS_TOKEN_HEADER
        responses = [
            self.client.get(self.api("/users/profile")),
            self.client.get(self.api("/users/profile"), headers={header: "garbage"}),
            self.client.get(self.api("/users/profile"), headers={header: expired}),
        ]
        for res in responses:
            self.assertEqual(res.status_code, 401)
            self.assertEqual(res.headers["www-authenticate"], "Bearer")
        bodies = [res.json() for res in responses]
        self.assertEqual(bodies[0], bodies[1])
        self.assertEqual(bodies[1], bodies[2])
        self.assertEqual(bodies[0]["detail"]["code"], "not_authenticated")

    def test_handler_not_invoked_on_rejection(self) -> None:
        with patch("app.api.v1.users._load_current") as handler_work:
            res = self.client.get(self.api("/users/profile"))
        self.assertEqual(res.status_code, 401)
        handler_work.assert_not_called()

    def test_token_of_deleted_user_is_rejected(self) -> None:
        headers = self.auth_headers()
        with self.SessionLocal() as db:
            db.delete(db.query(User).one())
            db.commit()
        res = self.client.get(self.api("/users/profile"), headers=headers)
        self.assertEqual(res.status_code, 401)


class TestConfiguredTokenHeader(ApiTestMixin, unittest.TestCase):
    settings_overrides = {"ACCESS_TOKEN_HEADER": "x-access-token"}

    def test_gate_reads_header_named_in_settings(self) -> None:
        self.register()
        token = self.login().json()["access_token"]
        res = self.client.get(self.api("/users/profile"), headers={"x-access-token": token})
        self.assertEqual(res.status_code, 200)
        res = self.client.get(self.api("/users/profile"), headers={"x_authorization": token})
        self.assertEqual(res.status_code, 401)


class TestErrorTranslation(unittest.TestCase):
    def test_validation_error_is_422_without_auth_challenge(self) -> None:
        error = auth_http_error(AuthServiceError(VALIDATION_ERROR, "missing field"))
        self.assertEqual(error.status_code, 422)
        self.assertIsNone(error.headers)
        self.assertEqual(error.detail, {"code": "validation_error", "message": "missing field"})

    def test_unauthenticated_codes_carry_bearer_challenge(self) -> None:
        error = auth_http_error(AuthServiceError(REFRESH_TOKEN_INVALID, "stale"))
        self.assertEqual(error.status_code, 401)
        self.assertEqual(error.headers, {"WWW-Authenticate": "Bearer"})


class TestErrorHandling(ApiTestMixin, unittest.TestCase):
    def test_unexpected_error_is_generic_500(self) -> None:
        with patch(
            "app.services.credential_store.UserStore.find_by_email",
            side_effect=RuntimeError("connection reset"),
        ):
            res = self.login()
        self.assertEqual(res.status_code, 500)
        body = res.json()
        self.assertEqual(body["detail"], "Internal Server Error")
        self.assertNotIn("Traceback", res.text)

    def test_prod_hides_exception_details(self) -> None:
        with patch("app.main.get_settings", return_value=self.settings.model_copy(
            update={"APP_ENV": "prod"}
        )), patch(
            "app.services.credential_store.UserStore.find_by_email",
            side_effect=RuntimeError("connection reset"),
        ):
            res = self.login()
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json(), {"detail": "Internal Server Error"})

    def test_dev_includes_exception_name_and_message(self) -> None:
        with patch(
            "app.services.credential_store.UserStore.find_by_email",
            side_effect=RuntimeError("connection reset"),
        ):
            res = self.login()
        self.assertEqual(
            res.json()["error"], {"name": "RuntimeError", "message": "connection reset"}
        )


class TestHealth(ApiTestMixin, unittest.TestCase):
    def test_reports_database_status(self) -> None:
        res = self.client.get(self.api("/health/"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "ok")
        self.assertEqual(res.json()["database"], "connected")


if __name__ == "__main__":
    unittest.main()
