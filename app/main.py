"""
Main application entry point - FastAPI app instance and configuration.
This is where the ASGI application is created and configured.
Run with: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI  # The FastAPI framework
from fastapi.middleware.cors import CORSMiddleware  # Cross-Origin Resource Sharing

from app.core.config import settings  # Application settings
from app.routers import ai  # AI settings, commands, photo analysis, dictation
from app.services.rate_limiter import RateLimitExceeded

# ---------------------------------------------------------------------------
# LOGGING
# ---------------------------------------------------------------------------
# Application loggers live under "binkeeper.*"; DEBUG raises their verbosity
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
# - docs_url: Swagger UI at http://localhost:8000/docs
# - redoc_url: ReDoc at http://localhost:8000/redoc
app = FastAPI(
    title=settings.APP_NAME,  # "Binkeeper Cloud Core"
    docs_url="/docs",
    redoc_url="/redoc",
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# The web and mobile clients call the API from other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# ai.router: /ai/settings, /ai/test, /ai/command, /ai/execute, /ai/undo,
#            /ai/analyze-image, /ai/structure-text
app.include_router(ai.router)

# Over-budget AI requests answer 429 {"error", "code": "RATE_LIMITED"}
app.add_exception_handler(RateLimitExceeded, ai.rate_limit_exceeded_handler)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """
    Simple health check endpoint for load balancers and container probes.

    Does NOT check database connectivity.

    Returns:
        {"status": "ok"}
    """
    return {"status": "ok"}
