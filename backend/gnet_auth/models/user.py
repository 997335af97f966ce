import uuid

from sqlalchemy import Column, String, Boolean, DateTime, Index, CheckConstraint, text
from sqlalchemy.sql import func

from ..database import Base

USER_ROLES = ("superadmin", "admin", "user", "vendor", "individual", "salesperson")


def generate_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_user_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(10), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "role IN (" + ", ".join(f"'{role}'" for role in USER_ROLES) + ")",
            name='check_user_role'
        ),
        # At most one superadmin
        Index(
            "uq_single_superadmin",
            "role",
            unique=True,
            sqlite_where=text("role = 'superadmin'"),
            postgresql_where=text("role = 'superadmin'"),
        ),
    )

    @property
    def custom_id(self) -> str:
        """Short display identifier used in emails."""
        return self.id[:8].upper()

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "isVerified": self.is_verified,
        }
