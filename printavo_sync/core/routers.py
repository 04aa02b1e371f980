"""
Configuración centralizada de routers para la aplicación FastAPI.

Registra los routers de la API v1 y los endpoints raíz y de health check.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from printavo_sync.api.v1.endpoints.activity import router as activity_router
from printavo_sync.api.v1.endpoints.webhooks import router as webhooks_router

logger = logging.getLogger(__name__)


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz y de health check.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        return {
            "message": app.title,
            "version": app.version,
            "status": "running",
            "timestamp": datetime.now(UTC).isoformat(),
            "endpoints": {
                "health": "/health",
                "webhooks": "/api/v1/webhooks/orders/create",
                "activity": "/api/v1/activity/{shop}",
            },
        }

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check(request: Request):
        """
        Liveness probe con verificación de la base de datos local.

        Returns:
            JSONResponse: 200 si la base de datos responde, 503 si no
        """
        services = getattr(request.app.state, "services", None)
        database = await services.conn_db.health_check() if services else {"test_passed": False}
        healthy = bool(database.get("test_passed"))

        if not healthy:
            logger.warning("Health check failed: database unavailable")

        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "ok": healthy,
                "status": "healthy" if healthy else "unhealthy",
                "version": app.version,
                "timestamp": datetime.now(UTC).isoformat(),
                "services": {"database": database},
            },
        )


def configure_all_routers(app: FastAPI) -> None:
    """
    Registra todos los routers.

    Args:
        app: Instancia de FastAPI
    """
    create_root_endpoints(app)
    app.include_router(webhooks_router, prefix="/api/v1/webhooks", tags=["Webhooks"])
    app.include_router(activity_router, prefix="/api/v1", tags=["Activity"])
    logger.debug("Routers configured")
