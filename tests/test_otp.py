import pytest
from sqlalchemy import select

from datasprint.database import session_scope
from datasprint.errors import NotFoundError, ValidationFailed
from datasprint.models.otp import RegistrationOtpEntry
from datasprint.services.otp import OtpStore, generate_code, is_code_valid


def test_generate_code_is_six_digits_in_range():
    for _ in range(200):
        code = generate_code()
        assert len(code) == 6
        assert code.isdigit()
        assert 100000 <= int(code) <= 999999


def test_registration_code_valid_until_expiry(otp_store, clock):
    record = otp_store.issue_registration_otp("a@x.com", ttl_seconds=120)

    clock.advance(119)
    assert otp_store.verify_registration_otp("a@x.com", record.code) is True

    clock.advance(2)
    assert otp_store.verify_registration_otp("a@x.com", record.code) is False


def test_registration_code_fails_exactly_at_expiry(otp_store, clock):
    record = otp_store.issue_registration_otp("a@x.com", ttl_seconds=120)
    clock.advance(120)
    assert otp_store.verify_registration_otp("a@x.com", record.code) is False


def test_registration_verify_is_repeatable(otp_store):
    record = otp_store.issue_registration_otp("a@x.com", ttl_seconds=120)
    assert otp_store.verify_registration_otp("a@x.com", record.code) is True
    assert otp_store.verify_registration_otp("a@x.com", record.code) is True


def test_reissue_replaces_previous_code(otp_store):
    first = otp_store.issue_registration_otp("a@x.com", ttl_seconds=120)
    second = otp_store.issue_registration_otp("A@X.com ", ttl_seconds=120)

    with session_scope() as session:
        rows = session.execute(select(RegistrationOtpEntry)).scalars().all()
    assert len(rows) == 1
    assert otp_store.verify_registration_otp("a@x.com", second.code) is True
    if first.code != second.code:
        assert otp_store.verify_registration_otp("a@x.com", first.code) is False


def test_wrong_or_unknown_code_is_rejected(otp_store):
    record = otp_store.issue_registration_otp("a@x.com", ttl_seconds=120)
    wrong = "000000" if record.code != "000000" else "111111"
    assert otp_store.verify_registration_otp("a@x.com", wrong) is False
    assert otp_store.verify_registration_otp("nobody@x.com", record.code) is False
    assert otp_store.verify_registration_otp("a@x.com", f" {record.code}") is False


def test_missing_email_is_rejected_before_persistence(otp_store):
    with pytest.raises(ValidationFailed):
        otp_store.issue_registration_otp("   ", ttl_seconds=120)
    with session_scope() as session:
        assert session.execute(select(RegistrationOtpEntry)).first() is None


def test_user_code_lifecycle(otp_store, clock, register):
    user_id = register()["user"]["id"]

    record = otp_store.issue_user_otp(user_id, ttl_seconds=300)
    assert otp_store.verify_user_otp(user_id, record.code) is True

    clock.advance(300)
    assert otp_store.verify_user_otp(user_id, record.code) is False


def test_user_code_for_unknown_user(otp_store):
    with pytest.raises(NotFoundError):
        otp_store.issue_user_otp("missing-user", ttl_seconds=300)
    assert otp_store.verify_user_otp("missing-user", "123456") is False
    assert otp_store.verify_user_otp(None, "123456") is False


def test_is_code_valid_without_pending_code(clock):
    assert is_code_valid(None, None, "123456", clock()) is False
    assert is_code_valid("123456", None, "123456", clock()) is False


def test_issue_overwrites_row_inserted_concurrently(otp_store, monkeypatch):
    otp_store.issue_registration_otp("a@x.com", ttl_seconds=120)

    real_find = OtpStore._find_registration_entry
    lookups = []

    def missed_first_lookup(self, session, email):
        lookups.append(email)
        if len(lookups) == 1:
            return None
        return real_find(self, session, email)

    monkeypatch.setattr(OtpStore, "_find_registration_entry", missed_first_lookup)
    record = otp_store.issue_registration_otp("a@x.com", ttl_seconds=120)
    monkeypatch.undo()

    with session_scope() as session:
        rows = session.execute(select(RegistrationOtpEntry)).scalars().all()
    assert len(lookups) == 2
    assert len(rows) == 1
    assert rows[0].otp == record.code
    assert otp_store.verify_registration_otp("a@x.com", record.code) is True
