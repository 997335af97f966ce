"""
Registration, OTP verification, login and token refresh flows
"""
import logging
from typing import NamedTuple, Optional

from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..models.user import User
from ..models.kyc import Kyc
from ..utils.exceptions import (
    ValidationError, ConflictError, AuthError, NotFoundError, DependencyError, MailDeliveryError
)
from ..utils.security import (
    get_password_hash, verify_password, token_payload,
    create_access_token, create_refresh_token, verify_refresh_token
)
from ..utils.validators import validate_registration
from ..utils.email_templates import otp_email_template, welcome_user_template, welcome_staff_template
from . import otp_service
from .email_service import EmailService, DeliveryPolicy

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
DUPLICATE_EMAIL = "User with this email already exists"
SUPERADMIN_EXISTS = "Super admin already exists"

class StaffRole(NamedTuple):
    title: str
    subject: str


STAFF_ROLES = {
    "superadmin": StaffRole(title="Super admin", subject="Welcome Super Admin"),
    "admin": StaffRole(title="Admin", subject="Welcome Admin"),
    "salesperson": StaffRole(title="Sales person", subject="Welcome Sales Person"),
}


def _reviewer(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def serialize_business(kyc: Kyc) -> dict:
    return {
        "id": kyc.id,
        "userId": kyc.user_id,
        "businessName": kyc.business_name,
        "gstNumber": kyc.gst_number,
        "plotNo": kyc.plot_no,
        "buildingName": kyc.building_name,
        "street": kyc.street,
        "landmark": kyc.landmark,
        "area": kyc.area,
        "pincode": kyc.pincode,
        "state": kyc.state,
        "city": kyc.city,
        "title": kyc.title,
        "contactPerson": kyc.contact_person,
        "mobileNumber": kyc.mobile_number,
        "whatsappNumber": kyc.whatsapp_number,
        "email": kyc.email,
        "workingDays": kyc.working_days or [],
        "businessHoursOpen": kyc.business_hours_open,
        "businessHoursClose": kyc.business_hours_close,
        "aadharNumber": kyc.aadhar_number,
        "aadharImage": kyc.aadhar_image,
        "videoKyc": kyc.video_kyc,
        "status": kyc.status,
        "approvedBy": _reviewer(kyc.approver),
        "approvedAt": kyc.approved_at,
        "rejectedBy": _reviewer(kyc.rejecter),
        "rejectedAt": kyc.rejected_at,
        "rejectionReason": kyc.rejection_reason,
        "createdAt": kyc.created_at,
        "updatedAt": kyc.updated_at,
    }


class AuthService:
    """Sequences the credential store, OTP store, token issuer and mailer"""

    def __init__(self, db: Session, mailer: EmailService):
        self.db = db
        self.mailer = mailer

    def _email_taken(self, email: str) -> bool:
        return self.db.query(User.id).filter(User.email == email).first() is not None

    def _commit_new_user(self, user: User):
        """Commit a freshly added user, turning constraint races into conflicts"""
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if user.role == "superadmin" and self._superadmin_exists():
                raise ConflictError(SUPERADMIN_EXISTS)
            raise ConflictError(DUPLICATE_EMAIL)
        self.db.refresh(user)

    def _superadmin_exists(self) -> bool:
        return self.db.query(User.id).filter(User.role == "superadmin").first() is not None

    async def register_user(self, name, email, phone, password, cpassword) -> User:
        """Create an unverified user and email them a verification code"""
        validate_registration(name, email, phone, password, cpassword)

        if self._email_taken(email):
            raise ConflictError(DUPLICATE_EMAIL)

        otp_record = otp_service.issue_otp(self.db, email)
        user = User(
            name=name,
            email=email,
            phone=str(phone),
            password_hash=get_password_hash(password),
            role="user",
            is_verified=False,
        )
        self.db.add(user)
        self._commit_new_user(user)
        code = otp_record.otp

        try:
            await self.mailer.send(
                to=email,
                subject=f"Email Verification - {settings.COMPANY_NAME}",
                html=otp_email_template(code),
                policy=DeliveryPolicy.REQUIRED,
            )
        except MailDeliveryError as e:
            # No account may outlive the code it depends on
            logger.warning(f"Rolling back registration for {email}: {e}")
            self.db.delete(user)
            otp_service.discard_pending(self.db, email)
            self.db.commit()
            raise DependencyError("Failed to send OTP email. Please try again.")

        logger.info(f"Registered user {user.id}, verification code sent to {email}")
        return user

    async def verify_otp(self, email, code) -> User:
        """Consume a verification code and mark the user verified"""
        if not email or not code:
            raise ValidationError("Email and OTP are required")

        record = otp_service.find_otp(self.db, email, str(code))
        if record is None:
            raise ValidationError("Invalid OTP")
        if record.verified:
            raise ValidationError("OTP already used")
        if otp_service.is_expired(record):
            raise ValidationError("OTP has expired")

        record.verified = True
        user = self.db.query(User).filter(User.email == email).first()
        if user is None:
            self.db.commit()
            raise NotFoundError("User not found")

        user.is_verified = True
        self.db.commit()
        self.db.refresh(user)

        await self.mailer.send(
            to=email,
            subject=f"Welcome to {settings.COMPANY_NAME}",
            html=welcome_user_template(
                name=user.name,
                email=user.email,
                phone=user.phone,
                custom_id=user.custom_id,
            ),
            policy=DeliveryPolicy.BEST_EFFORT,
        )

        # The consumed code stays until its expiry purge so replays are refused
        otp_service.discard_pending(self.db, email)
        self.db.commit()

        logger.info(f"User {user.id} verified")
        return user

    def login(self, email, password) -> dict:
        """Check credentials and issue an access/refresh token pair"""
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.db.query(User).filter(User.email == email).first()
        if user is None or not verify_password(password, user.password_hash):
            raise AuthError(INVALID_CREDENTIALS)

        payload = token_payload(user)
        data = {
            "user": user.to_public_dict(),
            "accessToken": create_access_token(payload),
            "refreshToken": create_refresh_token(payload),
        }

        if user.role == "vendor":
            businesses = self.vendor_businesses(user.id)
            data["businesses"] = businesses
            data["totalBusinesses"] = len(businesses)

        logger.info(f"User {user.id} logged in ({user.role})")
        return data

    def vendor_businesses(self, user_id: str) -> list:
        """The vendor's KYC records with reviewers resolved, newest first"""
        records = (
            self.db.query(Kyc)
            .options(joinedload(Kyc.approver), joinedload(Kyc.rejecter))
            .filter(Kyc.user_id == user_id)
            .order_by(Kyc.created_at.desc(), Kyc.id.desc())
            .all()
        )
        return [serialize_business(kyc) for kyc in records]

    async def register_staff(self, role, name, email, phone, password, cpassword) -> User:
        """Create a pre-verified superadmin, admin or salesperson account"""
        if role not in STAFF_ROLES:
            raise ValueError(f"Unsupported staff role: {role}")

        validate_registration(name, email, phone, password, cpassword)

        if role == "superadmin" and self._superadmin_exists():
            raise ConflictError(SUPERADMIN_EXISTS)

        if self._email_taken(email):
            raise ConflictError(DUPLICATE_EMAIL)

        user = User(
            name=name,
            email=email,
            phone=str(phone),
            password_hash=get_password_hash(password),
            role=role,
            is_verified=True,
        )
        self.db.add(user)
        self._commit_new_user(user)

        await self.mailer.send(
            to=email,
            subject=f"{STAFF_ROLES[role].subject} - {settings.COMPANY_NAME}",
            html=welcome_staff_template(
                name=user.name,
                email=user.email,
                phone=user.phone,
                password=password,
                custom_id=user.custom_id,
            ),
            policy=DeliveryPolicy.BEST_EFFORT,
        )

        logger.info(f"Provisioned {role} account {user.id}")
        return user

    def refresh_access_token(self, refresh_token) -> dict:
        """Issue a new access token for the holder of a valid refresh token"""
        if not refresh_token:
            raise ValidationError("Refresh token is required")

        try:
            claims = verify_refresh_token(refresh_token)
        except JWTError:
            raise AuthError("Invalid or expired refresh token")

        user = self.db.query(User).filter(User.id == claims["userId"]).first()
        if user is None:
            raise NotFoundError("User not found")

        return {
            "accessToken": create_access_token(token_payload(user)),
            "user": {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "role": user.role,
            },
        }
