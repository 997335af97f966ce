from pydantic import BaseModel, EmailStr, validator
from typing import Optional

# Fields are optional so that missing values reach the flow's own
# validation and come back as a 400 with a readable message.


def _normalize_email(v):
    # Runs before EmailStr; a blank value counts as missing
    if isinstance(v, str):
        v = v.strip().lower()
        return v or None
    return v


# Register (self-service and staff)
class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    cpassword: Optional[str] = None

    @validator('phone', pre=True)
    def phone_as_string(cls, v):
        # Clients sometimes send the phone as a JSON number
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @validator('email', pre=True)
    def normalize_email(cls, v):
        return _normalize_email(v)

# OTP Verify
class OTPVerify(BaseModel):
    email: Optional[EmailStr] = None
    otp: Optional[str] = None

    @validator('otp', pre=True)
    def otp_as_string(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @validator('email', pre=True)
    def normalize_email(cls, v):
        return _normalize_email(v)

# Login
class LoginRequest(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @validator('email', pre=True)
    def normalize_email(cls, v):
        return _normalize_email(v)

# Refresh
class RefreshTokenRequest(BaseModel):
    refreshToken: Optional[str] = None
