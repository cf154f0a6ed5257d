"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planet.api.v1.api import api_router
from planet.db.database import close_db, init_db
from planet.settings import settings
from planet.utils import setup_logging

logger = setup_logging("planet")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"Planet API started (environment={settings.environment})")
    yield
    close_db()


app = FastAPI(
    title="Planet API",
    description="Hierarchical markdown workspace with transactional editing sessions",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    """Service banner."""
    return {
        "status": "ok",
        "service": "Planet API",
        "version": "0.1.0",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "planet.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
