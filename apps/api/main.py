"""
Ad Research Asset API - FastAPI Backend
Main application entry point with health check and API routing.
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings, validate_security_settings
from database import engine, Base
import models  # noqa: F401
from routers import health, research, swipes
from services.blob_store import BlobStoreConfigurationError, reset_blob_store
from services.research_files import run_research_file_sweep_service


async def _periodic_research_file_sweep() -> None:
    interval_minutes = max(int(settings.RESEARCH_FILE_SWEEP_INTERVAL_MINUTES), 0)
    if interval_minutes <= 0:
        return
    while True:
        await asyncio.sleep(interval_minutes * 60)
        try:
            result = await run_research_file_sweep_service()
            if result.get("scanned"):
                print(
                    f"🧹 Research file sweep: scanned={result.get('scanned', 0)} "
                    f"reaped={result.get('reaped', 0)} failed={result.get('failed', 0)}"
                )
        except BlobStoreConfigurationError as exc:
            print(f"⛔ Research file sweep stopped, blob store misconfigured: {exc}")
            return
        except Exception as exc:
            print(f"⚠️ Research file sweep tick failed: {exc}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    print("🚀 Starting Ad Research Asset API...")
    validate_security_settings()
    if settings.AUTO_CREATE_DB_SCHEMA:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            print("🗄️ Database schema verified.")
        except Exception as e:
            print(f"⚠️ Database bootstrap skipped: {e}")
    sweep_task = None
    if int(settings.RESEARCH_FILE_SWEEP_INTERVAL_MINUTES) > 0:
        sweep_task = asyncio.create_task(_periodic_research_file_sweep())
        print(
            "📅 Research file sweep loop enabled "
            f"(every {int(settings.RESEARCH_FILE_SWEEP_INTERVAL_MINUTES)} min)."
        )
    yield
    # Shutdown
    if sweep_task is not None:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass
    reset_blob_store()
    await engine.dispose()
    print("👋 Shutting down API...")


app = FastAPI(
    title="Ad Research Asset API",
    description="Research files, swipes and their blob storage lifecycle",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request, exc: StarletteHTTPException):
    """Render every HTTP error as ``{"error": message}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(research.router, prefix="/research", tags=["Research"])
app.include_router(research.items_router, prefix="/research-items", tags=["Research"])
app.include_router(swipes.router, prefix="/swipes", tags=["Swipes"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Ad Research Asset API",
        "version": "0.1.0",
        "status": "running"
    }
