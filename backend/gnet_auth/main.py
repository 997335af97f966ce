import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .database import engine, Base
from .limiter import limiter
from .middleware.security import SecurityHeadersMiddleware
from .services.otp_cleanup import otp_cleanup_service
from .utils.exceptions import AuthServiceError

# Import all models (required for SQLAlchemy to create tables)
from .models import User, OTP, Kyc  # noqa: F401

from .routes import auth

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=settings.LOG_FILE,
)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Registration, email verification and token issuance for Gnet E-commerce",
    version="1.0.0",
    docs_url="/api/docs" if settings.ENABLE_API_DOCS else None,
    redoc_url="/api/redoc" if settings.ENABLE_API_DOCS else None
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(AuthServiceError)
async def auth_service_error_handler(request: Request, exc: AuthServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": message},
    )


# CORS Middleware
if settings.APP_ENV == "development":
    ALLOWED_ORIGINS = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
else:
    ALLOWED_ORIGINS = settings.origins_list

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    max_age=3600,
)

app.add_middleware(SecurityHeadersMiddleware)

# Include routers
app.include_router(auth.router, prefix="/api")

@app.on_event("startup")
async def startup_event():
    """Initialize database and start background services"""
    Base.metadata.create_all(bind=engine)
    print(f"✅ {settings.APP_NAME} Started Successfully")
    print(f"📍 Environment: {settings.APP_ENV}")
    print(f"⏱️ Rate limiting: {'Enabled' if settings.RATE_LIMIT_ENABLED else 'Disabled'}")
    if not settings.RESEND_API_KEY:
        print("⚠️  RESEND_API_KEY not set: registration emails will fail")

    await otp_cleanup_service.start()

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    await otp_cleanup_service.stop()
    print(f"🛑 {settings.APP_NAME} Shutting Down...")

@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": "1.0.0",
        "status": "running",
        "docs": "/api/docs" if settings.ENABLE_API_DOCS else "disabled"
    }

@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.APP_ENV,
        "database": "connected"
    }
