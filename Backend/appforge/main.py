# appforge/main.py
"""
AppForge Backend - agent orchestration and streaming API.
"""
import os
import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

# Rate limiting
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from appforge.core.config import settings
from appforge.services import build_services

print("🔑 Environment check:")
print(f"  OPENROUTER_API_KEY loaded: {bool(settings.llm.api_key)}")
print(f"  Default model: {settings.llm.default_model}")
print(f"  Build queue: {settings.queue.queue_name} @ {settings.queue.redis_url}")


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    print("🚀 AppForge starting...")

    from appforge.db import connect_db, disconnect_db
    await connect_db()

    # Services are built once and shared by every request
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services()

    yield

    print("🔌 Shutting down...")
    await app.state.services.close()
    await disconnect_db()


# ---------------------------------------------------------------------------
# APP INITIALIZATION
# ---------------------------------------------------------------------------

app = FastAPI(
    title="AppForge",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.services = None

# Monitoring
from appforge.lib.monitoring import register_monitoring
register_monitoring(app)

# CORS - set CORS_ORIGINS to a comma-separated list in production
cors_origins_str = os.getenv("CORS_ORIGINS", "*")
cors_origins = cors_origins_str.split(",") if cors_origins_str != "*" else ["*"]

if cors_origins == ["*"] and not settings.debug:
    print("⚠️ [CORS] Warning: Using allow_origins=['*'] - consider setting CORS_ORIGINS in production")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate Limiting - default 100 requests per minute per IP (RATE_LIMIT env)
rate_limit = os.getenv("RATE_LIMIT", "100/minute")
limiter = Limiter(key_func=get_remote_address, default_limits=[rate_limit])
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
print(f"🛡️ [SECURITY] Rate limiting enabled: {rate_limit}")


# ---------------------------------------------------------------------------
# API ROUTES
# ---------------------------------------------------------------------------

from appforge.api import health, agent, plans, builds, files

app.include_router(health.router)
app.include_router(agent.router)
app.include_router(plans.router)
app.include_router(builds.router)
app.include_router(files.router)


# ---------------------------------------------------------------------------
# RUN
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run("appforge.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)
