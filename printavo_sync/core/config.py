"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación usando Pydantic Settings para validación automática.
El núcleo de sincronización nunca lee el entorno directamente: recibe
un SyncConfig inmutable construido a partir de estos Settings.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class SyncConfig:
    """
    Process-wide reconciliation settings handed to the orchestrator.

    Attributes:
        default_api_key: Printavo key used when a merchant has none configured
        quote_due_days: Days added to submission time for quote due dates
        quote_source_tag: First tag applied to every created quote
        gift_card_product_types: Product types treated as gift cards (lowercased)
        non_physical_product_types: Product types that never sync (lowercased)
        default_line_item_skip_property: Property name used when the merchant leaves it blank
    """

    default_api_key: Optional[str] = None
    quote_due_days: int = 7
    quote_source_tag: str = "shopify"
    gift_card_product_types: frozenset[str] = frozenset({"gift card"})
    non_physical_product_types: frozenset[str] = frozenset({"digital", "service"})
    default_line_item_skip_property: str = "printavo_skip"


def _split_csv(value: str) -> frozenset[str]:
    return frozenset(part.strip().lower() for part in value.split(",") if part.strip())


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Shopify-Printavo Sync"
    APP_VERSION: str = "0.3.0"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)

    # === CONFIGURACIÓN DE BASE DE DATOS ===
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./data.db")

    # === CONFIGURACIÓN DE PRINTAVO ===
    PRINTAVO_API_URL: str = Field(default="https://www.printavo.com/api/v2/graphql")
    # Clave global usada cuando el comerciante no tiene una propia
    PRINTAVO_API_KEY: Optional[str] = Field(default=None)
    PRINTAVO_REQUEST_TIMEOUT: int = Field(default=30)
    # Solo aplica a respuestas 429
    PRINTAVO_MAX_RETRIES: int = Field(default=3)

    # === CONFIGURACIÓN DE SINCRONIZACIÓN ===
    QUOTE_DUE_DAYS: int = Field(default=7)
    QUOTE_SOURCE_TAG: str = Field(default="shopify")
    # Listas separadas por comas
    GIFT_CARD_PRODUCT_TYPES: str = Field(default="Gift Card")
    NON_PHYSICAL_PRODUCT_TYPES: str = Field(default="Digital,Service")
    DEFAULT_LINE_ITEM_SKIP_PROPERTY: str = Field(default="printavo_skip")
    RECONCILE_TIMEOUT_SECONDS: Optional[float] = Field(default=None)

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE_PATH: Optional[str] = Field(default=None)
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)
    LOG_FORMAT: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    LOG_JSON: bool = Field(default=False)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("QUOTE_DUE_DAYS")
    @classmethod
    def validate_quote_due_days(cls, v):
        """Valida que los días de entrega sean positivos."""
        if v < 1:
            raise ValueError("QUOTE_DUE_DAYS debe ser mayor o igual a 1")
        return v

    @field_validator("RECONCILE_TIMEOUT_SECONDS")
    @classmethod
    def validate_reconcile_timeout(cls, v):
        """Valida que el timeout sea positivo cuando se define."""
        if v is not None and v <= 0:
            raise ValueError("RECONCILE_TIMEOUT_SECONDS debe ser mayor que 0")
        return v

    def to_sync_config(self) -> SyncConfig:
        """
        Construye la configuración inmutable del núcleo de sincronización.

        Returns:
            SyncConfig: Valores explícitos para el orquestador
        """
        return SyncConfig(
            default_api_key=self.PRINTAVO_API_KEY or None,
            quote_due_days=self.QUOTE_DUE_DAYS,
            quote_source_tag=self.QUOTE_SOURCE_TAG,
            gift_card_product_types=_split_csv(self.GIFT_CARD_PRODUCT_TYPES),
            non_physical_product_types=_split_csv(self.NON_PHYSICAL_PRODUCT_TYPES),
            default_line_item_skip_property=self.DEFAULT_LINE_ITEM_SKIP_PROPERTY,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Usa LRU cache para evitar recrear la configuración
    múltiples veces durante la ejecución.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Recarga la configuración (útil para testing).

    Returns:
        Settings: Nueva instancia de configuración
    """
    get_settings.cache_clear()
    return get_settings()
