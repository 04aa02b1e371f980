"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Las AppException se responden con el formato de create_error_response;
cualquier otra excepción se registra y se responde como error 500.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from printavo_sync.utils.error_handler import AppException, create_error_response, log_error

logger = logging.getLogger(__name__)


def configure_exception_handlers(app: FastAPI, include_traceback: bool = False) -> None:
    """
    Registra los manejadores de excepciones.

    Args:
        app: Instancia de FastAPI
        include_traceback: Incluir traceback en las respuestas (solo debug)
    """

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        log_error(exc, {"path": str(request.url.path)})
        content = create_error_response(exc, include_traceback=include_traceback)
        content["path"] = str(request.url.path)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log_error(exc, {"path": str(request.url.path)})
        content = create_error_response(exc, include_traceback=include_traceback)
        content["path"] = str(request.url.path)
        return JSONResponse(status_code=500, content=content)
