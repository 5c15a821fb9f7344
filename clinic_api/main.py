from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
import logging
import traceback

from .api.v1.auth import router as auth_router
from .api.v1.users import router as users_router
from .api.v1.appointments import router as appointments_router
from .api.v1.prescriptions import router as prescriptions_router
from .api.v1.inventory import router as inventory_router
from .api.v1.medical_records import router as medical_records_router
from .api.v1.dashboard import router as dashboard_router
from .api.v1.reports import router as reports_router
from .core.config import settings
from .core.database import DatabaseHealthCheck, engine, init_db

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Role-based clinic management: appointments, prescriptions, records and pharmacy stock",
    openapi_url="/api/v1/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Middleware setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Only add TrustedHostMiddleware outside of tests
if not settings.TESTING:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.localhost", "testserver"]
    )

@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.4f}s"
    )

    return response

# Exception handlers: every error leaves as {"message": ...}
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Not Found - {request.url.path}"
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "message": f"{location}: {message}" if location else message,
            "errors": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
                for error in errors
            ]
        }
    )

@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"Internal server error on {request.method} {request.url.path}: {str(exc)}")
    content = {"message": "An unexpected error occurred"}
    if settings.is_development:
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

# Include routers; each request first checks the store is reachable
database_health = DatabaseHealthCheck(engine)

for router in (
    auth_router,
    users_router,
    appointments_router,
    prescriptions_router,
    inventory_router,
    medical_records_router,
    dashboard_router,
    reports_router,
):
    app.include_router(router, prefix="/api/v1", dependencies=[Depends(database_health)])

# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")

    db_url = settings.get_database_url
    db_type = "PostgreSQL" if "postgresql" in db_url else "SQLite" if "sqlite" in db_url else "Unknown"
    logger.info(f"Using {db_type} database")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    logger.info("Application startup complete")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}...")

@app.get("/health")
async def health_check():
    """Liveness plus store reachability."""
    healthy = database_health.is_healthy()
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "degraded",
            "database": "connected" if healthy else "unreachable",
            "timestamp": time.time(),
            "version": settings.VERSION
        }
    )

@app.get("/")
async def root():
    return {
        "message": "Clinic Management API is running",
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/health"
    }

@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "authentication": "/api/v1/auth",
            "users": "/api/v1/users",
            "appointments": "/api/v1/appointments",
            "prescriptions": "/api/v1/prescriptions",
            "inventory": "/api/v1/inventory",
            "medical_records": "/api/v1/medical-records",
            "dashboard": "/api/v1/dashboard",
            "reports": "/api/v1/reports",
            "docs": "/docs",
            "openapi": "/api/v1/openapi.json"
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clinic_api.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
