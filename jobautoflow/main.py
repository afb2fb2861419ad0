import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from jobautoflow.config import settings
from jobautoflow.core.errors import AppError
from jobautoflow.core.rate_limiter import rate_limiter
from jobautoflow.database import init_db, engine
from jobautoflow.logging_config import setup_logging
from jobautoflow.routers import admin, applications, auth, jobs, notifications, preferences, profile

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="JobAutoFlow API",
    description="Job search, AI match scoring and auto-apply.",
    version="1.0.0",
)

cors_origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(preferences.router)
app.include_router(jobs.router)
app.include_router(applications.router)
app.include_router(notifications.router)
app.include_router(admin.router)


@app.exception_handler(AppError)
async def app_error_handler(request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    logger.exception("Unhandled server error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.middleware("http")
async def apply_rate_limits(request, call_next):
    path = request.url.path
    if request.method == "OPTIONS":
        return await call_next(request)

    client_ip = request.client.host if request.client else "unknown"
    limit = None
    window = 60
    if path in {"/auth/login", "/auth/register", "/auth/me/password"}:
        limit = settings.rate_limit_auth_per_min
    elif path == "/jobs/matches/refresh":
        limit = settings.rate_limit_match_refresh_per_min
    elif path == "/applications/auto-apply":
        limit = settings.rate_limit_auto_apply_per_min

    if limit is not None and limit > 0:
        key = f"{client_ip}:{path}"
        allowed, retry_after = rate_limiter.allow(key, limit=limit, window_seconds=window)
        if not allowed:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests. Please retry shortly.", "code": "RATE_LIMIT"},
                headers={"Retry-After": str(retry_after)},
            )

    return await call_next(request)


@app.get("/health/live")
def health_live():
    return {"status": "ok"}


@app.get("/health/ready")
def health_ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ready"}
    except Exception:
        logger.exception("Readiness check failed")
        return JSONResponse(status_code=503, content={"status": "not_ready"})


@app.on_event("startup")
def on_startup():
    logger.info("Starting JobAutoFlow API")
    env = (settings.app_env or "development").lower()
    if env in {"production", "prod"}:
        if settings.secret_key == "replace-with-a-long-random-secret-key":
            raise RuntimeError("SECRET_KEY placeholder is not allowed in production")
        if "username:password@" in settings.database_url:
            raise RuntimeError("DATABASE_URL placeholder credentials are not allowed in production")
    else:
        if settings.secret_key == "replace-with-a-long-random-secret-key":
            logger.warning("SECRET_KEY is using placeholder default. Set SECRET_KEY in .env for secure deployments.")
        if "username:password@" in settings.database_url:
            logger.warning("DATABASE_URL appears to use placeholder credentials. Set DATABASE_URL in .env.")
    if not settings.bedrock_llm_enabled:
        logger.info("Bedrock LLM disabled; match scoring uses the rule-based scorer only")
    init_db()


@app.get("/")
def root():
    return {"message": "JobAutoFlow API. See /docs for the endpoint reference."}
