"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api import auth, chats, messages
from src.config import get_settings
from src.exceptions import register_exception_handlers

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logger.info(f"Starting Chat App API ({settings.environment})")
    yield
    logger.info("Shutting down Chat App API")


app = FastAPI(
    title="Chat App API",
    description="Direct and group messaging with cookie-based sessions",
    version="0.1.0",
    lifespan=lifespan,
)

# Session cookies need credentialed CORS from the frontend origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.client_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register routers
app.include_router(auth.router)
app.include_router(chats.router)
app.include_router(messages.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
