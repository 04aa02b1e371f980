"""
Endpoints para webhooks de Shopify.

orders/create dispara la reconciliación del pedido en background. Shopify
espera una respuesta rápida, así que siempre se responde 200; el resultado
queda en el registro de actividad del comerciante.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import JSONResponse

from printavo_sync.api.v1.schemas import ShopifyOrderPayload
from printavo_sync.core.dependencies import SyncServices, get_services
from printavo_sync.domain.models import SourceOrder
from printavo_sync.services.sync.orchestrator import OrderSyncOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()

SHOP_DOMAIN_HEADER = "X-Shopify-Shop-Domain"
WEBHOOK_ID_HEADER = "X-Shopify-Webhook-Id"


@router.post("/orders/create", status_code=status.HTTP_200_OK)
async def orders_create_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    services: SyncServices = Depends(get_services),
) -> JSONResponse:
    """
    Recibe el webhook orders/create de Shopify.

    Args:
        request: Request HTTP con el webhook
        background_tasks: Tareas en background
        services: Servicios de la aplicación

    Returns:
        JSONResponse: Respuesta inmediata para Shopify
    """
    shop = (request.headers.get(SHOP_DOMAIN_HEADER) or "").strip().lower()
    webhook_id = request.headers.get(WEBHOOK_ID_HEADER)

    if not shop:
        logger.error(f"orders/create webhook {webhook_id} without {SHOP_DOMAIN_HEADER} header")
        return JSONResponse(
            status_code=200,
            content={"received": True, "processing": "failed", "error": f"Missing {SHOP_DOMAIN_HEADER} header"},
        )

    try:
        payload = ShopifyOrderPayload.model_validate(await request.json())
    except ValueError as e:
        # JSON decode and pydantic validation errors are both ValueErrors
        logger.error(f"Invalid orders/create payload from {shop}: {e}")
        # Shopify espera 200 incluso en errores para evitar reintentos
        return JSONResponse(
            status_code=200,
            content={"received": True, "processing": "failed", "error": "Invalid order payload"},
        )

    order = payload.to_domain()
    background_tasks.add_task(
        process_order_created,
        services.orchestrator,
        shop,
        order,
        services.settings.RECONCILE_TIMEOUT_SECONDS,
    )

    logger.info(f"Received orders/create for {shop}: order {order.display_name or order.id}")
    return JSONResponse(
        status_code=200,
        content={
            "received": True,
            "order_id": order.id,
            "webhook_id": webhook_id,
            "processing": "background",
        },
    )


async def process_order_created(
    orchestrator: OrderSyncOrchestrator,
    shop: str,
    order: SourceOrder,
    deadline_seconds: Optional[float] = None,
) -> None:
    """Reconcilia un pedido en background."""
    outcome = await orchestrator.reconcile(shop, order, deadline_seconds=deadline_seconds)
    logger.info(f"orders/create {shop} {order.id}: {outcome.status.value} - {outcome.message}")
