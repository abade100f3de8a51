"""FastAPI application entry point for the Seekr review notifier."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from seekr.config import Settings, configure_logging, get_settings
from seekr.dependencies import close_services, get_app_settings, get_es_client, get_store, init_services
from seekr.routers import (
    debug_notifications_router,
    events_router,
    profiles_router,
)

logger = logging.getLogger(__name__)

# Document read by the Firestore health check; it need not exist
HEALTH_CHECK_ID = "_health"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown events."""
    settings = get_settings()
    configure_logging(settings)

    # Startup
    logger.info("Starting %s...", settings.app_name)
    try:
        await init_services(settings)
    except Exception as e:
        logger.warning("Could not initialize backends: %s", e)

    yield

    # Shutdown
    logger.info("Shutting down %s...", settings.app_name)
    await close_services()


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="Seekr Review Notifier",
        description="Sends a push notification to a hunt's owner when the hunt receives a review",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(events_router)
    app.include_router(debug_notifications_router)
    app.include_router(profiles_router)

    @app.get("/health")
    async def health_check(settings: Settings = Depends(get_app_settings)):
        """
        Health check endpoint.

        Returns the status of the application and its document store.
        """
        try:
            if settings.store_backend == "elasticsearch":
                es = await get_es_client()
                await es.info()
            else:
                store = await get_store()
                await store.get_document(settings.profiles_collection, HEALTH_CHECK_ID)
            store_status = "connected"
        except Exception as e:
            store_status = f"error: {str(e)}"

        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "store": settings.store_backend,
            "store_status": store_status,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "seekr.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
