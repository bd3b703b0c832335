"""Main FastAPI application."""
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse
from contextlib import asynccontextmanager
import os

from voicecall.core.logging import setup_logging
from voicecall.api import health, retell_call


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    yield


app = FastAPI(
    title="Voice Call Demo",
    description="Voice call widget backend proxying to Retell AI",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers (must be before static file mounting to take precedence)
app.include_router(health.router, tags=["health"])
app.include_router(retell_call.router, tags=["retell"])

# Mount static files (for frontend)
static_dir = os.path.join(os.path.dirname(__file__), "static")
if os.path.exists(static_dir):
    assets_dir = os.path.join(static_dir, "assets")
    if os.path.exists(assets_dir):
        app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")


@app.get("/")
async def root():
    """Serve frontend index.html."""
    index_path = os.path.join(static_dir, "index.html")
    if os.path.exists(index_path):
        return FileResponse(index_path)
    return {
        "message": "Voice Call Demo API",
        "version": "0.1.0",
        "frontend": "Frontend not built. Place the built widget in voicecall/static.",
    }


if __name__ == "__main__":
    import uvicorn

    from voicecall.core.config import settings

    uvicorn.run(app, host=settings.host, port=settings.port)
