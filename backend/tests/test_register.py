# tests/test_register.py
from datetime import datetime

import pytest

from gnet_auth.models import User, OTP


def test_register_creates_unverified_user_and_sends_otp(client, db, mailer, registration):
    resp = client.post("/api/auth/register", json=registration)

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["userId"]

    user = db.query(User).filter(User.email == "a@x.com").one()
    assert user.id == body["userId"]
    assert user.is_verified is False
    assert user.role == "user"
    assert user.password_hash != "password1"

    record = db.query(OTP).filter(OTP.email == "a@x.com").one()
    assert record.verified is False
    assert len(record.otp) == 6 and record.otp.isdigit()

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "a@x.com"
    assert record.otp in mailer.sent[0]["html"]


def test_register_accepts_numeric_phone(client, registration):
    registration["phone"] = 1234567890
    resp = client.post("/api/auth/register", json=registration)
    assert resp.status_code == 201


@pytest.mark.parametrize("field", ["name", "email", "phone", "password", "cpassword"])
def test_register_requires_all_fields(client, db, registration, field):
    registration.pop(field)
    resp = client.post("/api/auth/register", json=registration)

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "All fields are required"}
    assert db.query(User).count() == 0


@pytest.mark.parametrize("changes, message", [
    ({"cpassword": "password2"}, "Password and confirm password do not match"),
    ({"password": "short", "cpassword": "short"}, "Password must be at least 8 characters long"),
    ({"phone": "12345"}, "Phone number must be exactly 10 digits"),
    ({"phone": "12345678901"}, "Phone number must be exactly 10 digits"),
    ({"phone": "12345-6789"}, "Phone number must be exactly 10 digits"),
])
def test_register_rejects_invalid_fields(client, db, mailer, registration, changes, message):
    registration.update(changes)
    resp = client.post("/api/auth/register", json=registration)

    assert resp.status_code == 400
    assert resp.json()["message"] == message
    assert db.query(User).count() == 0
    assert db.query(OTP).count() == 0
    assert mailer.sent == []


def test_register_duplicate_email_creates_nothing(client, db, mailer, registration):
    assert client.post("/api/auth/register", json=registration).status_code == 201
    db.expire_all()
    otp_before = db.query(OTP).filter(OTP.email == "a@x.com").one()

    registration["name"] = "Alice Again"
    resp = client.post("/api/auth/register", json=registration)

    assert resp.status_code == 400
    assert resp.json()["message"] == "User with this email already exists"
    db.expire_all()
    assert db.query(User).count() == 1
    otps = db.query(OTP).filter(OTP.email == "a@x.com").all()
    assert [o.id for o in otps] == [otp_before.id]
    assert len(mailer.sent) == 1


def test_register_duplicate_email_is_case_insensitive(client, registration):
    assert client.post("/api/auth/register", json=registration).status_code == 201
    registration["email"] = "A@X.COM"
    resp = client.post("/api/auth/register", json=registration)
    assert resp.status_code == 400


def test_register_mail_failure_deletes_user(client, db, mailer, registration):
    mailer.fail = True

    resp = client.post("/api/auth/register", json=registration)

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "message": "Failed to send OTP email. Please try again.",
    }
    db.expire_all()
    assert db.query(User).count() == 0
    assert db.query(OTP).count() == 0


def test_register_again_after_mail_failure(client, mailer, registration):
    mailer.fail = True
    assert client.post("/api/auth/register", json=registration).status_code == 500

    mailer.fail = False
    assert client.post("/api/auth/register", json=registration).status_code == 201


def test_register_replaces_prior_otp_for_email(client, db, registration):
    stale = OTP(email="a@x.com", otp="111111", verified=False,
                expires_at=datetime(2099, 1, 1))
    db.add(stale)
    db.commit()

    assert client.post("/api/auth/register", json=registration).status_code == 201

    db.expire_all()
    records = db.query(OTP).filter(OTP.email == "a@x.com").all()
    assert len(records) == 1
    assert records[0].expires_at.year != 2099


def test_malformed_body_is_a_400(client):
    resp = client.post(
        "/api/auth/register",
        content="not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.parametrize("email", ["not-an-email", "a@", "@x.com"])
def test_register_rejects_malformed_email(client, db, mailer, registration, email):
    registration["email"] = email
    resp = client.post("/api/auth/register", json=registration)

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert db.query(User).count() == 0
    assert mailer.sent == []


def test_register_blank_email_is_missing(client, registration):
    registration["email"] = "   "
    resp = client.post("/api/auth/register", json=registration)

    assert resp.status_code == 400
    assert resp.json()["message"] == "All fields are required"
