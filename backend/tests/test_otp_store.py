# tests/test_otp_store.py
import asyncio
from datetime import datetime, timedelta, timezone

from gnet_auth.models import OTP
from gnet_auth.services import otp_service
from gnet_auth.services.otp_cleanup import OtpCleanupService


def test_generated_codes_are_six_digits_in_range():
    for _ in range(500):
        code = otp_service.generate_otp()
        assert len(code) == 6
        assert code.isdigit()
        assert 100000 <= int(code) <= 999999


def test_issue_keeps_single_record_per_email(db):
    otp_service.issue_otp(db, "a@x.com")
    db.commit()
    latest = otp_service.issue_otp(db, "a@x.com")
    db.commit()

    records = db.query(OTP).filter(OTP.email == "a@x.com").all()
    assert len(records) == 1
    assert records[0].otp == latest.otp
    assert records[0].verified is False


def test_issue_sets_configured_expiry(db):
    before = datetime.now(timezone.utc)
    record = otp_service.issue_otp(db, "a@x.com", expires_in_minutes=10)
    db.commit()

    expires_at = otp_service.as_utc(record.expires_at)
    assert before + timedelta(minutes=10) <= expires_at
    assert expires_at <= datetime.now(timezone.utc) + timedelta(minutes=10)


def test_expiry_check_is_strict():
    expires_at = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
    record = OTP(email="a@x.com", otp="123456", expires_at=expires_at)

    assert otp_service.is_expired(record, now=expires_at) is False
    assert otp_service.is_expired(record, now=expires_at + timedelta(microseconds=1)) is True


def test_naive_expiry_is_treated_as_utc():
    record = OTP(email="a@x.com", otp="123456", expires_at=datetime(2025, 1, 1, 12, 0))
    now = datetime(2025, 1, 1, 12, 0, 1, tzinfo=timezone.utc)
    assert otp_service.is_expired(record, now=now) is True


def test_purge_removes_expired_records_regardless_of_state(db):
    past = datetime.now(timezone.utc) - timedelta(minutes=1)
    future = datetime.now(timezone.utc) + timedelta(minutes=5)
    db.add_all([
        OTP(email="old@x.com", otp="111111", expires_at=past, verified=False),
        OTP(email="used@x.com", otp="222222", expires_at=past, verified=True),
        OTP(email="live@x.com", otp="333333", expires_at=future, verified=False),
    ])
    db.commit()

    purged = otp_service.purge_expired(db)
    db.commit()

    assert purged == 2
    assert [r.email for r in db.query(OTP).all()] == ["live@x.com"]


def test_discard_pending_keeps_consumed_code(db):
    future = datetime.now(timezone.utc) + timedelta(minutes=5)
    db.add_all([
        OTP(email="a@x.com", otp="111111", expires_at=future, verified=True),
        OTP(email="a@x.com", otp="222222", expires_at=future, verified=False),
    ])
    db.commit()

    otp_service.discard_pending(db, "a@x.com")
    db.commit()

    assert [r.otp for r in db.query(OTP).all()] == ["111111"]


def test_find_matches_email_and_code(db):
    record = otp_service.issue_otp(db, "a@x.com")
    db.commit()

    assert otp_service.find_otp(db, "a@x.com", record.otp).id == record.id
    assert otp_service.find_otp(db, "b@x.com", record.otp) is None


def test_cleanup_service_purges_now(db):
    db.add(OTP(email="old@x.com", otp="111111",
               expires_at=datetime.now(timezone.utc) - timedelta(seconds=5)))
    db.commit()

    assert OtpCleanupService(cleanup_interval=60).cleanup_now() == 1
    db.expire_all()
    assert db.query(OTP).count() == 0


def test_cleanup_service_loop_purges_until_stopped(db):
    db.add(OTP(email="old@x.com", otp="111111",
               expires_at=datetime.now(timezone.utc) - timedelta(seconds=5)))
    db.commit()
    service = OtpCleanupService(cleanup_interval=0.01)

    async def run_briefly():
        await service.start()
        assert service.is_running
        await asyncio.sleep(0.05)
        await service.stop()

    asyncio.run(run_briefly())

    assert service.is_running is False
    assert service._task is None
    db.expire_all()
    assert db.query(OTP).count() == 0


def test_lookup_keeps_expired_code_until_next_issue(db):
    db.add(OTP(email="old@x.com", otp="111111",
               expires_at=datetime.now(timezone.utc) - timedelta(seconds=5)))
    db.commit()

    expired = otp_service.find_otp(db, "old@x.com", "111111")
    assert expired is not None
    assert otp_service.is_expired(expired)

    otp_service.issue_otp(db, "new@x.com")
    db.commit()
    assert otp_service.find_otp(db, "old@x.com", "111111") is None
