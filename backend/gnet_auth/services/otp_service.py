"""
OTP store - one-time email verification codes

At most one pending code exists per email. Rows past their expiry are purged
on every store access and by the background cleanup service.
"""
import random
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models.otp import OTP

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_otp() -> str:
    """Generate a 6-digit numeric code in [100000, 999999]"""
    return str(random.randint(OTP_MIN, OTP_MAX))


def is_expired(record: OTP, now: Optional[datetime] = None) -> bool:
    """A code is expired strictly after its expiry instant"""
    now = now or utcnow()
    return now > as_utc(record.expires_at)


def purge_expired(db: Session, now: Optional[datetime] = None) -> int:
    """Delete every OTP past its expiry, verified or not. Does not commit."""
    now = now or utcnow()
    return db.query(OTP).filter(OTP.expires_at < now).delete(synchronize_session=False)


def issue_otp(db: Session, email: str, expires_in_minutes: Optional[int] = None) -> OTP:
    """Replace any OTP for ``email`` with a fresh unverified code. Does not commit."""
    minutes = expires_in_minutes if expires_in_minutes is not None else settings.OTP_EXPIRES_MIN
    now = utcnow()

    purge_expired(db, now)
    db.query(OTP).filter(OTP.email == email).delete(synchronize_session=False)

    record = OTP(
        email=email,
        otp=generate_otp(),
        expires_at=now + timedelta(minutes=minutes),
        verified=False,
    )
    db.add(record)
    return record


def find_otp(db: Session, email: str, code: str) -> Optional[OTP]:
    """Look up the OTP matching both email and code.

    Unlike issuing, a lookup never purges expired rows: an expired code
    must still be found so the caller can report "OTP has expired" rather
    than "Invalid OTP". The background purge removes it later.
    """
    return (
        db.query(OTP)
        .filter(OTP.email == email, OTP.otp == code)
        .order_by(OTP.id.desc())
        .first()
    )


def discard_pending(db: Session, email: str) -> int:
    """Delete the unverified OTPs for ``email``. Does not commit."""
    return (
        db.query(OTP)
        .filter(OTP.email == email, OTP.verified == False)  # noqa: E712
        .delete(synchronize_session=False)
    )
