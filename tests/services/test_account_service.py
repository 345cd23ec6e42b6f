"""Tests for AccountService."""

from datetime import UTC, datetime, timedelta

import pytest

from src.errors.domain import InvalidSessionError, NotFoundError
from src.services.account_service import AccountService


@pytest.fixture
def svc(test_db):
    """Service under test."""
    return AccountService(test_db)


def _iso(delta: timedelta) -> str:
    return (datetime.now(UTC) + delta).isoformat()


class TestLookups:
    def test_get_account(self, svc, make_account):
        make_account("u1")
        assert svc.get_account("u1").email == "u1@example.com"

    def test_get_missing_account_raises(self, svc):
        with pytest.raises(NotFoundError) as exc_info:
            svc.get_account("ghost")
        assert exc_info.value.code == "E-1003"

    def test_exists_checks(self, svc, make_account):
        make_account("u1", telegram_username="handle1")
        assert svc.account_exists("u1")
        assert not svc.account_exists("u2")
        assert svc.email_exists("u1@example.com")
        assert not svc.email_exists("nobody@example.com")
        assert svc.telegram_username_exists("handle1")
        assert not svc.telegram_username_exists("handle2")


class TestSessionTokens:
    def test_non_expiring_token(self, svc, make_account, make_session):
        make_account("u1")
        make_session("tok", "u1")
        assert svc.resolve_session_token("tok") == "u1"

    def test_future_expiry_is_valid(self, svc, make_account, make_session):
        make_account("u1")
        make_session("tok", "u1", expires_at=_iso(timedelta(hours=1)))
        assert svc.resolve_session_token("tok") == "u1"

    def test_past_expiry_is_invalid(self, svc, make_account, make_session):
        make_account("u1")
        make_session("tok", "u1", expires_at=_iso(-timedelta(hours=1)))
        assert svc.resolve_session_token("tok") is None

    def test_naive_expiry_is_read_as_utc(self, svc, make_account, make_session):
        make_account("u1")
        naive = (datetime.now(UTC) - timedelta(minutes=5)).replace(tzinfo=None)
        make_session("tok", "u1", expires_at=naive.isoformat())
        assert svc.resolve_session_token("tok") is None

    def test_unknown_and_missing_tokens(self, svc):
        assert svc.resolve_session_token("nope") is None
        assert svc.resolve_session_token(None) is None
        assert svc.resolve_session_token("") is None

    def test_get_account_for_bad_token_raises(self, svc):
        with pytest.raises(InvalidSessionError) as exc_info:
            svc.get_account_for_token("nope")
        assert exc_info.value.code == "E-5001"


class TestUpdateProfile:
    def test_sets_provided_fields_only(self, svc, make_account, make_session):
        make_account("u1", region="Minsk", user_role="owner")
        make_session("tok", "u1")

        account = svc.update_profile("tok", region="Vilnius", user_role=None)

        assert account.region == "Vilnius"
        assert account.user_role == "owner"

    def test_empty_handle_does_not_clear(self, svc, make_account, make_session):
        make_account("u1", telegram_username="keep_me")
        make_session("tok", "u1")
        account = svc.update_profile("tok", telegram_username="")
        assert account.telegram_username == "keep_me"

    def test_unknown_fields_ignored(self, svc, make_account, make_session):
        make_account("u1")
        make_session("tok", "u1")
        account = svc.update_profile("tok", email="evil@example.com")
        assert account.email == "u1@example.com"

    def test_invalid_token_raises(self, svc):
        with pytest.raises(InvalidSessionError):
            svc.update_profile("nope", region="X")
