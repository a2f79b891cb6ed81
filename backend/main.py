"""
GestureFlow Backend API

FastAPI application for presentation body-language coaching with
live session scoring.

Run with:
    uvicorn main:app --reload --host 0.0.0.0 --port 8000

API docs available at:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from api.routes import router as api_router
from api.websocket import websocket_endpoint
from api.dependencies import detector_available

# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan (startup/shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup code before app starts accepting requests,
    and cleanup code when app shuts down.
    """
    # Startup
    logger.info(f" {settings.app_name} starting up...")
    logger.info(f" API docs: http://localhost:{settings.port}/docs")
    logger.info(f" WebSocket: ws://localhost:{settings.port}/ws/session")
    logger.info(f" Session stats file: {settings.stats_path}")

    # Server-side detection is optional; landmark sessions work without it
    if detector_available():
        logger.info(" MediaPipe pose detector initialized successfully")
    else:
        logger.info(" Server-side detection disabled; clients must send landmarks")

    yield  # App runs here

    # Shutdown
    logger.info(f" {settings.app_name} shutting down...")


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="""
    **Presentation Body-Language Coach**

    Scores gestures and posture from pose landmarks and tracks live
    practice sessions.

    ## Features

    - **Gesture Classification** (power pose, open gesture, steeple, ...)
    - **Impact Scoring** with slouch and fidget penalties
    - **Live Sessions** via WebSocket with streaks, celebrations and tips
    - **Session History** with aggregate statistics

    ## Endpoints

    - `GET /api/health` - Health check
    - `POST /api/analysis/landmarks` - Analyse one landmark set
    - `POST /api/pose/detect` - Single image detection and analysis
    - `GET /api/tips` - Coaching tip catalog
    - `GET /api/sessions` - Recent sessions
    - `GET /api/stats` - Aggregate statistics
    - `WS /ws/session` - Live practice session

    ## WebSocket Protocol

    Connect to `/ws/session`, send `start_session`, then landmarks as JSON:
```json
    {
        "type": "landmarks",
        "data": {"landmarks": [{"x": 0.5, "y": 0.3, "visibility": 0.9}], "smile_score": 0.6},
        "timestamp": 1704067200000
    }
```
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# CORS Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Routes
# =============================================================================

# Include REST API routes
app.include_router(api_router, prefix="/api")

# WebSocket endpoint
app.websocket("/ws/session")(websocket_endpoint)


# =============================================================================
# Root endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "name": settings.app_name,
        "version": settings.version,
        "description": "Presentation body-language coach",
        "docs": "/docs",
        "health": "/api/health",
        "websocket": f"ws://localhost:{settings.port}/ws/session"
    }


# =============================================================================
# Run directly (for development)
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
