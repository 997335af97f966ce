from contextlib import contextmanager
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..limiter import limiter
from ..models.user import User
from ..schemas.auth import RegisterRequest, OTPVerify, LoginRequest, RefreshTokenRequest
from ..services.auth_service import AuthService, STAFF_ROLES
from ..services.email_service import EmailService, get_email_service
from ..utils.exceptions import AuthServiceError, DependencyError
from ..utils.security import get_current_user, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_auth_service(
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_email_service)
) -> AuthService:
    return AuthService(db, mailer)


@contextmanager
def flow_boundary(service: AuthService, failure_message: str):
    """Let known errors through; report anything else as a 500"""
    try:
        yield
    except AuthServiceError:
        raise
    except Exception as e:
        service.db.rollback()
        logger.error(f"{failure_message}: {e}", exc_info=True)
        raise DependencyError(failure_message, error=str(e))


# Register regular user (email verification required)
@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def register(request: Request, data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    with flow_boundary(service, "Registration failed"):
        user = await service.register_user(
            data.name, data.email, data.phone, data.password, data.cpassword
        )

    return {
        "success": True,
        "message": "OTP sent to your email. Please verify to complete registration.",
        "userId": user.id
    }


# Verify OTP and complete registration
@router.post("/verify-otp")
@limiter.limit("10/minute")
async def verify_otp(request: Request, data: OTPVerify, service: AuthService = Depends(get_auth_service)):
    with flow_boundary(service, "OTP verification failed"):
        user = await service.verify_otp(data.email, data.otp)

    return {
        "success": True,
        "message": "Email verified successfully. Welcome email sent!",
        "user": user.to_public_dict()
    }


# Login (all roles)
@router.post("/login")
@limiter.limit("20/minute")
async def login(request: Request, data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    with flow_boundary(service, "Login failed"):
        result = service.login(data.email, data.password)

    return {
        "success": True,
        "message": "Login successful",
        "data": result
    }


# Refresh access token
@router.post("/refresh-token")
@limiter.limit("30/minute")
async def refresh_token(request: Request, data: RefreshTokenRequest, service: AuthService = Depends(get_auth_service)):
    with flow_boundary(service, "Token refresh failed"):
        result = service.refresh_access_token(data.refreshToken)

    return {
        "success": True,
        "message": "Access token refreshed successfully",
        "data": result
    }


async def _register_staff(role: str, data: RegisterRequest, service: AuthService) -> dict:
    title = STAFF_ROLES[role].title
    with flow_boundary(service, f"{title} registration failed"):
        user = await service.register_staff(
            role, data.name, data.email, data.phone, data.password, data.cpassword
        )

    return {
        "success": True,
        "message": f"{title} registered successfully",
        "user": user.to_public_dict()
    }


# Super Admin Register (public, only one may ever exist)
@router.post("/register/superadmin", status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
async def register_superadmin(request: Request, data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    return await _register_staff("superadmin", data, service)


# Admin Register (superadmin only)
@router.post("/register/admin", status_code=status.HTTP_201_CREATED)
async def register_admin(
    data: RegisterRequest,
    current_user: User = Depends(require_role(["superadmin"])),
    service: AuthService = Depends(get_auth_service)
):
    return await _register_staff("admin", data, service)


# Sales Person Register (superadmin or admin)
@router.post("/register/salesperson", status_code=status.HTTP_201_CREATED)
async def register_salesperson(
    data: RegisterRequest,
    current_user: User = Depends(require_role(["superadmin", "admin"])),
    service: AuthService = Depends(get_auth_service)
):
    return await _register_staff("salesperson", data, service)


# Get current user info
@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    return {
        "success": True,
        "message": "User profile fetched successfully",
        "user": current_user.to_public_dict()
    }
