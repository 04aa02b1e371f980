"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown: logging, base de
datos local, cliente de Printavo y orquestador de sincronización.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from printavo_sync.core.config import get_settings
from printavo_sync.core.dependencies import build_services, close_services
from printavo_sync.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.

    Si `app.state.services` ya existe (tests), no se construye ni se cierra
    nada aquí.

    Args:
        app: Instancia de FastAPI
    """
    settings = getattr(app.state, "settings", None) or get_settings()

    # === STARTUP ===
    setup_logging(settings)
    logger.info(f"🚀 Iniciando {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")

    owns_services = getattr(app.state, "services", None) is None
    if owns_services:
        app.state.services = await build_services(settings)
        logger.info("✅ Base de datos y cliente de Printavo inicializados")

    if not settings.PRINTAVO_API_KEY:
        logger.info("PRINTAVO_API_KEY not set: merchants must configure their own key")

    logger.info("🎉 Aplicación iniciada correctamente")

    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")
    if owns_services:
        try:
            await close_services(app.state.services)
        except Exception as e:
            logger.error(f"❌ Error durante el shutdown: {e}")
        app.state.services = None
    logger.info("👋 Aplicación cerrada correctamente")
