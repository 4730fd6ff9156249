import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from iam.config import settings
from iam.core.exceptions import (
    UnauthorizedException,
    NotFoundException,
    AccessDeniedException,
    ValidationException,
    ConflictException,
    DataIntegrityError,
)
from iam.routes import (
    access_routes,
    grant_routes,
    landlord_routes,
    policy_routes,
    role_routes,
    setup_routes,
    user_routes,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(AccessDeniedException)
async def access_denied_exception_handler(request: Request, exc: AccessDeniedException):
    logger.info("Access denied on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(ConflictException)
async def conflict_exception_handler(request: Request, exc: ConflictException):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(DataIntegrityError)
async def data_integrity_exception_handler(request: Request, exc: DataIntegrityError):
    logger.error("Data integrity fault on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Stored authorization data is inconsistent"},
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
app.include_router(setup_routes.router, prefix="/api/setup", tags=["Setup"])
app.include_router(landlord_routes.router, prefix="/api/landlords", tags=["Landlords"])
app.include_router(role_routes.router, prefix="/api/landlords", tags=["Roles & Permissions"])
app.include_router(policy_routes.router, prefix="/api/tenants", tags=["Policies"])
app.include_router(grant_routes.router, prefix="/api/tenants", tags=["Role Grants"])
app.include_router(user_routes.router, prefix="/api/users", tags=["Users"])
app.include_router(access_routes.router, prefix="/api/access", tags=["Access"])
