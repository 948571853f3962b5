from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import time
import logging

from .api import appointments, clients, tasks, users
from .api.deps import wants_json
from .api.templating import redirect, render
from .core.config import settings
from .core.database import check_database_connection, init_db
from .core.exceptions import (
    AuthError, ConflictError, CsrfError, NotAuthenticatedError,
    NotFoundError, StoreError, ValidationError,
)
from .core.messages import get_message
from .core.sessions import get_session_store, session_middleware

# Configure logging
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Session-authenticated appointment booking",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
)

# Sessions are loaded before any route dependency runs
app.middleware("http")(session_middleware)

# Custom middleware for request logging and timing
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Log request
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.4f}s"
    )

    return response

def _json_error(status_code: int, error: str, details: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "details": details})

# Exception handlers
@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    if wants_json(request):
        return _json_error(status.HTTP_401_UNAUTHORIZED, "Not Authenticated", exc.message)
    return redirect("/users/login")

@app.exception_handler(CsrfError)
async def csrf_error_handler(request: Request, exc: CsrfError):
    if wants_json(request):
        return _json_error(status.HTTP_403_FORBIDDEN, "Forbidden", exc.message)
    return render(request, "error.html", {"error": exc.message}, status_code=status.HTTP_403_FORBIDDEN)

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    # Absent and foreign records look the same to the caller
    if wants_json(request):
        return _json_error(status.HTTP_404_NOT_FOUND, "Not Found", exc.message)
    return redirect("/appointments")

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Store failure on {request.method} {request.url.path}: {exc.details}")
    message = get_message("store_error")
    if wants_json(request):
        return _json_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", message)
    return render(request, "error.html", {"error": message}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

@app.exception_handler(ValidationError)
@app.exception_handler(ConflictError)
@app.exception_handler(AuthError)
async def domain_error_handler(request: Request, exc):
    codes = {
        ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
        ConflictError: status.HTTP_409_CONFLICT,
        AuthError: status.HTTP_401_UNAUTHORIZED,
    }
    status_code = codes.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if wants_json(request):
        return _json_error(status_code, type(exc).__name__, exc.message)
    return render(request, "error.html", {"error": exc.message}, status_code=status_code)

@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(f"Internal server error: {str(exc)}")
    message = get_message("unexpected_error")
    if wants_json(request):
        return _json_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", message)
    return render(request, "error.html", {"error": message}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

# Include routers
app.include_router(users.router)
app.include_router(appointments.router)
app.include_router(clients.router)
app.include_router(tasks.router)

# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup; any failure here aborts the process."""
    logger.info(f"Starting {settings.APP_NAME}...")

    db_url = settings.get_database_url
    db_type = "PostgreSQL" if "postgresql" in db_url else "SQLite" if "sqlite" in db_url else "Unknown"
    logger.info(f"Using {db_type} database")

    try:
        check_database_connection()
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    try:
        get_session_store().ping()
        logger.info(f"Session store ready ({settings.session_backend})")
    except Exception as e:
        logger.error(f"Failed to reach session store: {str(e)}")
        raise

    logger.info("Application startup complete")

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    logger.info(f"Shutting down {settings.APP_NAME}...")

# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION
    }

@app.get("/")
async def home(request: Request):
    return render(request, "home.html")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "booking.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
