"""
Main FastAPI application for the Disaster Alert service
"""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from disaster_alert.config import settings
from disaster_alert.api import system, users, sos, places, assistant
from disaster_alert.db import StoreError, create_store

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.APP_DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Starting Disaster Alert service ({settings.APP_ENV})...")
    if getattr(app.state, "store", None) is None:
        app.state.store = create_store(settings)

    store = app.state.store
    try:
        await asyncio.to_thread(store.initialize)
        logger.info(f"Record store ready ({store.backend})")
    except StoreError as e:
        # Storage is optional at startup; /health and the places proxy keep working
        if settings.IS_PRODUCTION:
            logger.error(f"Error initializing {store.backend} storage: {e}")
            logger.info("Server will continue without storage; it is retried on the next request")
        else:
            logger.exception(f"Error initializing {store.backend} storage")

    yield

    # Shutdown
    logger.info("Shutting down Disaster Alert service...")


app = FastAPI(
    title="Disaster Alert API",
    description="User alert status, SOS reports and safe-place search for the disaster alert app",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and parameters are validation errors: 400, not 422"""
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())}
    )


# Include routers
app.include_router(system.router, tags=["System"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(sos.router, prefix="/api/sos", tags=["SOS"])
app.include_router(places.router, prefix="/api/places", tags=["Places"])
app.include_router(assistant.router, prefix="/api/assistant", tags=["Assistant"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Disaster Alert",
        "version": "1.0.0",
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("disaster_alert.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.APP_DEBUG)
