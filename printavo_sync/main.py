"""
Shopify-Printavo Sync - FastAPI Application Entry Point

Recibe los webhooks orders/create de Shopify y crea exactamente una
cotización de Printavo por pedido, según la política de cada comerciante.

Para desarrollo:
    uvicorn printavo_sync.main:app --reload
"""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from printavo_sync.core.config import Settings, get_settings
from printavo_sync.core.exception_handlers import configure_exception_handlers
from printavo_sync.core.lifespan import lifespan
from printavo_sync.core.routers import configure_all_routers

logger = logging.getLogger(__name__)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Args:
        settings: Configuración a usar (por defecto get_settings())

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Reconciliación de pedidos de Shopify con cotizaciones de Printavo",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
    )
    app.state.settings = settings

    configure_exception_handlers(app, include_traceback=settings.DEBUG)
    configure_all_routers(app)

    return app


app = create_application()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "printavo_sync.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
