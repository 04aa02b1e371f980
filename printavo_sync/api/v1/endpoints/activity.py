"""
Endpoints de actividad y conexión con Printavo.

Exponen el registro de actividad de un comerciante con las estadísticas
del día, y la prueba de conexión de una API key de Printavo.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from printavo_sync.core.dependencies import SyncServices, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


class ConnectionTestRequest(BaseModel):
    """Modelo para la prueba de conexión."""

    api_key: str = Field(..., min_length=1)


@router.get("/activity/{shop}")
async def get_activity(
    shop: str,
    limit: int = Query(50, ge=1, le=500),
    services: SyncServices = Depends(get_services),
) -> Dict[str, Any]:
    """
    Actividad reciente y estadísticas del día para un comerciante.

    Args:
        shop: Dominio de la tienda
        limit: Máximo de registros
    """
    shop = shop.strip().lower()
    records = await services.activity.list_recent(shop, limit=limit)
    stats = await services.activity.stats_today(shop)
    return {
        "shop": shop,
        "activity": [record.to_dict() for record in records],
        "stats": stats,
    }


@router.post("/printavo/test-connection")
async def test_printavo_connection(
    request: ConnectionTestRequest,
    services: SyncServices = Depends(get_services),
) -> Dict[str, Any]:
    """Verifica una API key de Printavo."""
    result = await services.printavo_client.test_connection(request.api_key.strip())
    logger.info(f"Printavo connection test: {result['message']}")
    return result
