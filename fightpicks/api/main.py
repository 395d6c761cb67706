"""
Fight Picks League API Server

FastAPI server for league membership, fight picks, leaderboards and fight cards.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
import logging
import os
import uvicorn
from slowapi import _rate_limit_exceeded_handler  # type: ignore
from slowapi.errors import RateLimitExceeded  # type: ignore
from sqlalchemy.exc import SQLAlchemyError

from fightpicks.api.routes import router, limiter as routes_limiter
from fightpicks.database import db
from fightpicks.models.schemas import ErrorResponse, HealthResponse
from fightpicks.services.errors import FightPicksError, PersistenceError

# Allow log level to be configured via environment variable (default: INFO)
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, log_level, logging.INFO)
logging.basicConfig(
    level=numeric_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events."""
    logger.info("Starting up Fight Picks API...")

    # Create tables if they don't exist
    try:
        await db.init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {PersistenceError.from_exception(e).message}", exc_info=True)
        # Don't raise - the app still starts and reports persistence errors per request

    yield

    logger.info("Shutting down Fight Picks API...")
    await db.engine.dispose()


app = FastAPI(
    title="Fight Picks API",
    description="API for fight pick leagues, leaderboards and fight cards",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup rate limiter
app.state.limiter = routes_limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS origins configured via ALLOWED_ORIGINS env var
allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(FightPicksError)
async def fight_picks_error_handler(request: Request, exc: FightPicksError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=exc.message).model_dump())


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    error = PersistenceError.from_exception(exc)
    logger.error(f"Database error on {request.method} {request.url.path}: {error.message}")
    return JSONResponse(status_code=error.status_code, content=ErrorResponse(error=error.message).model_dump())


app.include_router(router)


@app.get("/api/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok")


@app.get("/", response_class=HTMLResponse)
async def root():
    """API root endpoint - frontend is served separately."""
    return HTMLResponse(
        content="""
        <!DOCTYPE html>
        <html>
            <head>
                <title>Fight Picks API</title>
                <style>
                    body { font-family: sans-serif; max-width: 800px; margin: 50px auto; padding: 20px; }
                    h1 { color: #b91c1c; }
                    a { color: #b91c1c; }
                </style>
            </head>
            <body>
                <h1>Fight Picks API</h1>
                <p>API is running successfully!</p>
                <h2>Available Resources:</h2>
                <ul>
                    <li><a href="/docs">API Documentation</a> - Interactive API docs</li>
                    <li><a href="/api/health">Health Check</a> - System status</li>
                </ul>
            </body>
        </html>
    """
    )


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
