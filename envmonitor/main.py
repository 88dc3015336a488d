import logging
import time
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from envmonitor.config import settings
from envmonitor.core.dependencies import get_environment_store
from envmonitor.core.exceptions import AppException, ValidationError
from envmonitor.database.engine import get_engine
from envmonitor.modules.environments import routes as environments_routes
from envmonitor.modules.environments.schemas import REQUIRED_MESSAGE, HealthResponse
from envmonitor.modules.environments.store import EnvironmentStore
from envmonitor.scripts.seed_environments import seed_environments

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logging.Formatter.converter = time.gmtime
logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def describe_validation_error(exc: RequestValidationError) -> str:
    """Turn the first request validation error into a single readable message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    loc = tuple(error.get("loc", ()))
    if error.get("type") == "json_invalid" or loc == ("body",):
        return "Request body must be a JSON object"
    field = loc[-1] if loc else None
    if error.get("type") == "missing" and field in ("url", "status"):
        return REQUIRED_MESSAGE
    if error.get("type") in ("required", "invalid_status", "empty_url"):
        return error["msg"]
    return f"Invalid value for {field}"


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    error = ValidationError(describe_validation_error(exc))
    logger.info(f"Rejected {request.method} {request.url.path}: {error.message}")
    return await app_exception_handler(request, error)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "Not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
    return JSONResponse(status_code=500, content={"error": "Internal server error", "detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


class RequestLoggingMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            logger.info(f"{scope['method']} {scope['path']}")
        await self.app(scope, receive, send)


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(environments_routes.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    store = EnvironmentStore(get_engine())
    store.create_schema()
    if settings.seed_demo_data:
        seed_environments(store)
    logger.info(f"Database ready: {settings.database_url}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/health", response_model=HealthResponse)
@limiter.exempt
async def health():
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@app.get("/ready")
@limiter.exempt
def ready(store: EnvironmentStore = Depends(get_environment_store)):
    """Readiness probe: the store must answer a trivial query."""
    try:
        store.ping()
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"error": "Database unavailable"})
    return {"status": "ready"}
