"""
Clase ConnDB para gestión de la conexión a la base de datos local.

Esta clase maneja el engine asíncrono de SQLAlchemy, la factory de
sesiones y la creación del esquema (comerciantes, ledger de idempotencia
y registro de actividad).
"""

import logging
import time
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from printavo_sync.db.schema import SCHEMA_STATEMENTS
from printavo_sync.utils.error_handler import DatabaseException

logger = logging.getLogger(__name__)


class ConnDB:
    """
    Gestión de la conexión a la base de datos.

    Una instancia por aplicación; se crea en el lifespan y se inyecta en
    los repositorios.
    """

    def __init__(self, database_url: str, echo: bool = False):
        """
        Inicializa la clase ConnDB.

        Args:
            database_url: URL asíncrona de SQLAlchemy (p.ej. sqlite+aiosqlite:///./data.db)
            echo: Log de queries SQL
        """
        self.database_url = database_url
        self.echo = echo
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._connection_tested = False

    async def initialize(self):
        """
        Inicializa el engine, prueba la conexión y crea las tablas.

        Raises:
            DatabaseException: Si falla la inicialización
        """
        if self.engine is not None:
            logger.info("Database connection already initialized")
            return

        try:
            logger.info("Initializing database connection...")

            self.engine = create_async_engine(self.database_url, echo=self.echo, future=True)
            self.session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

            async with self.engine.begin() as connection:
                for statement in SCHEMA_STATEMENTS:
                    await connection.execute(text(statement))

            await self._test_connection()
            logger.info("Database connection initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database connection: {e}")
            await self._cleanup_failed_initialization()
            raise DatabaseException(
                message=f"Failed to initialize database connection: {str(e)}",
                operation="initialization",
            ) from e

    async def _test_connection(self):
        async with self.session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            if result.scalar() != 1:
                raise DatabaseException("Connection test returned unexpected value", operation="test")
        self._connection_tested = True

    async def _cleanup_failed_initialization(self):
        """Limpia recursos en caso de fallo de inicialización."""
        if self.engine:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        self._connection_tested = False

    def get_session(self) -> AsyncSession:
        """
        Obtiene una nueva sesión de base de datos.

        Raises:
            DatabaseException: Si no hay conexión inicializada
        """
        if not self.is_initialized():
            raise DatabaseException(
                message="Database connection not initialized. Call initialize() first.",
                operation="session_creation",
            )
        return self.session_factory()

    def is_initialized(self) -> bool:
        """
        Verifica si la conexión está inicializada.

        Returns:
            bool: True si está inicializada y probada
        """
        return self.engine is not None and self.session_factory is not None and self._connection_tested

    async def test_connection(self) -> bool:
        """Prueba la conexión de forma no destructiva."""
        try:
            if not self.is_initialized():
                return False
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False

    async def close(self):
        """Cierra la conexión y libera el engine."""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database engine disposed")
        self.engine = None
        self.session_factory = None
        self._connection_tested = False

    async def health_check(self) -> dict:
        """
        Realiza un health check de la conexión.

        Returns:
            dict: Estado de salud de la conexión
        """
        health_info = {
            "connection_initialized": self.is_initialized(),
            "test_passed": False,
            "response_time_ms": None,
        }
        start_time = time.time()
        health_info["test_passed"] = await self.test_connection()
        health_info["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
        return health_info

    def __repr__(self) -> str:
        return f"ConnDB(initialized={self.is_initialized()}, url={self.database_url.split('://')[0]})"
