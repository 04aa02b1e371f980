"""
Contenedor de servicios y dependencias de FastAPI.

Los servicios se construyen una vez en el lifespan y se guardan en
`app.state.services`; los endpoints los obtienen con Depends().
"""

from dataclasses import dataclass

from fastapi import HTTPException, Request, status

from printavo_sync.core.config import Settings
from printavo_sync.db.connection import ConnDB
from printavo_sync.db.printavo_client import PrintavoClient
from printavo_sync.db.repositories import ActivityRepository
from printavo_sync.services.sync.orchestrator import OrderSyncOrchestrator, create_orchestrator


@dataclass
class SyncServices:
    """Servicios compartidos por la aplicación."""

    settings: Settings
    orchestrator: OrderSyncOrchestrator
    activity: ActivityRepository
    printavo_client: PrintavoClient
    conn_db: ConnDB


async def build_services(settings: Settings) -> SyncServices:
    """
    Inicializa la base de datos y el cliente de Printavo y arma el orquestador.

    Raises:
        DatabaseException: Si no se puede inicializar la base de datos
    """
    conn_db = ConnDB(settings.DATABASE_URL, echo=settings.DEBUG)
    await conn_db.initialize()

    printavo_client = PrintavoClient(
        api_url=settings.PRINTAVO_API_URL,
        timeout=settings.PRINTAVO_REQUEST_TIMEOUT,
        max_retries=settings.PRINTAVO_MAX_RETRIES,
    )
    await printavo_client.initialize()

    return SyncServices(
        settings=settings,
        orchestrator=create_orchestrator(settings, conn_db, printavo_client),
        activity=ActivityRepository(conn_db),
        printavo_client=printavo_client,
        conn_db=conn_db,
    )


async def close_services(services: SyncServices) -> None:
    await services.printavo_client.close()
    await services.conn_db.close()


def get_services(request: Request) -> SyncServices:
    """Dependency para obtener los servicios de la aplicación."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Services not initialized")
    return services
