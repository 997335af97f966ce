"""
Models package - Import all SQLAlchemy models here
"""

from .user import User, USER_ROLES
from .otp import OTP
from .kyc import Kyc

__all__ = [
    "User",
    "USER_ROLES",
    "OTP",
    "Kyc"
]
