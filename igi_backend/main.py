import time
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from igi_backend import __version__
from igi_backend.config import settings, validate_environment
from igi_backend.core.middleware import SecurityHeadersMiddleware, log_requests
from igi_backend.database.supabase_client import get_supabase_admin, check_database
from igi_backend.modules.auth import routes as auth_routes
from igi_backend.modules.teams import routes as teams_routes
from igi_backend.modules.rounds import routes as rounds_routes
from igi_backend.modules.telecast import routes as telecast_routes
from igi_backend.modules.submissions import routes as submissions_routes
from igi_backend.modules.evaluation import routes as evaluation_routes
from igi_backend.modules.contest import routes as contest_routes
from igi_backend.modules.mission import routes as mission_routes
from igi_backend.modules.uploads import routes as uploads_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies are plain 400s for the contest clients
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.middleware("http")(log_requests)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api")
app.include_router(teams_routes.router, prefix="/api")
app.include_router(rounds_routes.router, prefix="/api")
app.include_router(telecast_routes.router, prefix="/api")
app.include_router(submissions_routes.router, prefix="/api")
app.include_router(evaluation_routes.router, prefix="/api")
app.include_router(contest_routes.router, prefix="/api")
app.include_router(mission_routes.router, prefix="/api")
app.include_router(uploads_routes.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info(f"Application startup ({settings.environment}, port {settings.port})")
    validate_environment()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to igi-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy", "timestamp": int(time.time() * 1000)}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: configuration first, then a teams query against Supabase."""
    missing = validate_environment()
    if missing:
        return JSONResponse(status_code=503, content={"status": "not ready", "missing": missing})
    if not check_database(get_supabase_admin()):
        return JSONResponse(status_code=503, content={"status": "not ready", "database": "unreachable"})
    return {"status": "ready"}
