"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import StartSessionMiddleware
from api.routers import session
from config.settings import Config
from core.engine import get_engine

config = Config.load()

logging.basicConfig(
    level=config.app.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Periodic cleanup of expired sessions."""
    async def _cleanup_loop():
        while True:
            await asyncio.sleep(config.app.cleanup_interval)
            removed = get_engine().store.cleanup_expired()
            if removed:
                logger.info("Removed %d expired sessions", removed)

    task = asyncio.create_task(_cleanup_loop())
    yield
    task.cancel()


app = FastAPI(
    title=config.app.title,
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - allow the Vite dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.app.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Session cookie middleware
app.add_middleware(StartSessionMiddleware)

# Register routers
app.include_router(session.router)


@app.get("/health")
def health():
    return {"status": "healthy"}
