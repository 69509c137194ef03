"""Unit tests for app.services.session: the access-token gate in front of protected routes."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from app.core.security import issue_access_token, issue_refresh_token
from app.services.auth import NOT_AUTHENTICATED
from app.services.session import SessionRejected, authenticate, extract_token
from support import make_token_config


class TestExtractToken(unittest.TestCase):
    def test_plain_and_bearer_values(self) -> None:
        self.assertEqual(extract_token("abc"), "abc")
        self.assertEqual(extract_token("Bearer abc"), "abc")
        self.assertEqual(extract_token("bearer  abc "), "abc")

    def test_absent_or_blank(self) -> None:
        self.assertIsNone(extract_token(None))
        self.assertIsNone(extract_token("   "))
        self.assertIsNone(extract_token("Bearer "))


class TestAuthenticate(unittest.TestCase):
    def setUp(self) -> None:
        self.config = make_token_config()
        self.user = MagicMock(id=5)
        self.store = MagicMock()
        self.store.find_by_id.return_value = self.user

    def _rejected(self, raw: str | None, **kwargs: object) -> SessionRejected:
        with self.assertRaises(SessionRejected) as ctx:
            authenticate(self.store, raw, self.config, **kwargs)
        return ctx.exception

    def test_valid_token_resolves_user(self) -> None:
        token = issue_access_token(5, self.config)
        self.assertIs(authenticate(self.store, token, self.config), self.user)
        self.store.find_by_id.assert_called_once_with(5)

    def test_rejections_look_identical_but_keep_reasons(self) -> None:
        issued = datetime.now(UTC) - timedelta(hours=1)
        cases = {
            "missing": None,
            "malformed": "not-a-jwt",
            "expired": issue_access_token(5, self.config, now=issued),
            "signature_invalid": issue_access_token(
                5, make_token_config(access_secret="some-other-secret-0123456789abcdef")
            ),
        }
        for reason, raw in cases.items():
            with self.subTest(reason=reason):
                error = self._rejected(raw)
                self.assertEqual(error.reason, reason)
                self.assertEqual(error.code, NOT_AUTHENTICATED)
                self.assertEqual(error.message, "Invalid or missing access token")
        self.store.find_by_id.assert_not_called()

    def test_refresh_token_is_not_accepted_as_access_token(self) -> None:
        token = issue_refresh_token(5, self.config)
        # Wrong secret for the access gate.
        self.assertEqual(self._rejected(token).reason, "signature_invalid")

    def test_deleted_user_is_rejected(self) -> None:
        self.store.find_by_id.return_value = None
        token = issue_access_token(5, self.config)
        self.assertEqual(self._rejected(token).reason, "user_not_found")

    def test_gate_never_writes_to_store(self) -> None:
        authenticate(self.store, issue_access_token(5, self.config), self.config)
        self._rejected(None)
        self.store.save.assert_not_called()
        self.store.set_refresh_token.assert_not_called()
        self.store.swap_refresh_token.assert_not_called()


if __name__ == "__main__":
    unittest.main()
