# app/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import sessions, zones, vehicles, enforcement, transactions, stats, health, alerts
from app.database import create_tables
from app.config import settings
from app.services.exceptions import ParkingError
from app.utils.logger import get_logger
import time
import asyncio

logger = get_logger(__name__)

app = FastAPI(
    title="Parking Payment API",
    description="Timed parking sessions: checkout, payment, extension, early termination and refunds.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (web + mobile clients) ─────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the web app origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth between the web frontend and this service.
    Health check and docs stay open. Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Domain Error Handler ─────────────────────────────────────────────────────
@app.exception_handler(ParkingError)
async def parking_error_handler(request: Request, exc: ParkingError):
    logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    content = {"detail": exc.message, "error": type(exc).__name__}
    if exc.details:
        content.update(jsonable_encoder(exc.details))
    return JSONResponse(status_code=exc.status_code, content=content)


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(sessions.router,     prefix="/api/v1", tags=["🅿️  Sessions"])
app.include_router(zones.router,        prefix="/api/v1", tags=["🗺️  Zones"])
app.include_router(vehicles.router,     prefix="/api/v1", tags=["🚗 Vehicles"])
app.include_router(enforcement.router,  prefix="/api/v1", tags=["👮 Enforcement"])
app.include_router(transactions.router, prefix="/api/v1", tags=["💳 Transactions"])
app.include_router(stats.router,        prefix="/api/v1", tags=["📊 Stats"])
app.include_router(alerts.router,       prefix="/api/v1", tags=["🔔 Alerts"])
app.include_router(health.router,       prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
_background_tasks = set()


@app.on_event("startup")
async def startup():
    logger.info("🚀 Parking backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"💳 Payment mode: {settings.PAYMENT_MODE} | tax rate: {settings.TAX_RATE}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")

    if settings.EXPIRY_MONITOR_ENABLED:
        from app.services.expiry_monitor import start_expiry_monitor
        task = asyncio.create_task(start_expiry_monitor(), name="expiry-monitor")
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Parking backend shutting down...")
    for task in _background_tasks:
        task.cancel()
