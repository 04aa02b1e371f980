"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones personalizadas de la aplicación
y proporciona utilidades para manejo consistente de errores.

Taxonomía usada por el motor de sincronización:
- ConfigurationException: comerciante o política ausente / mal configurada
- ValidationException: datos de la orden no sincronizables (sin email, sin artículos)
- PrintavoAPIException: Printavo devolvió errores o una respuesta malformada
- DatabaseException: fallos del almacenamiento local
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Errores de configuración del comerciante
    MERCHANT_NOT_FOUND = "MERCHANT_NOT_FOUND"

    # Errores de datos de la orden
    MISSING_EMAIL = "MISSING_EMAIL"
    NO_ELIGIBLE_ITEMS = "NO_ELIGIBLE_ITEMS"

    # Errores de Printavo
    PRINTAVO_API_ERROR = "PRINTAVO_API_ERROR"
    CONTACT_CREATION_FAILED = "CONTACT_CREATION_FAILED"
    QUOTE_CREATION_FAILED = "QUOTE_CREATION_FAILED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Errores de persistencia
    DATABASE_ERROR = "DATABASE_ERROR"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_retryable: bool = False,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
            is_retryable: Si la operación puede reintentarse
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_retryable = is_retryable
        self.timestamp = datetime.now(timezone.utc)
        self.traceback_str = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "timestamp": self.timestamp.isoformat(),
            "traceback": self.traceback_str,
        }

    def __str__(self) -> str:
        """String representation del error."""
        return f"{self.error_code.value}: {self.message}"


class ConfigurationException(AppException):
    """
    Excepción para configuración ausente o inválida (comerciante, credenciales, modo de sync).
    """

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=400,
            severity=ErrorSeverity.MEDIUM,
            **kwargs,
        )
        self.setting = setting
        self.details.update({"setting": setting})


class MerchantNotFoundException(ConfigurationException):
    """El comerciante no tiene configuración registrada."""

    def __init__(self, shop: str, **kwargs):
        super().__init__(
            message="Merchant not found",
            setting="merchant",
            error_code=ErrorCode.MERCHANT_NOT_FOUND,
            **kwargs,
        )
        self.shop = shop
        self.details.update({"shop": shop})


class ValidationException(AppException):
    """
    Excepción para errores de validación de datos.
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            error_code: Código específico de validación
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value

        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
            }
        )


class MissingEmailException(ValidationException):
    """La orden no tiene email en orden, cliente ni dirección de facturación."""

    def __init__(self, order_id: Any = None, **kwargs):
        super().__init__(
            message="Order must have a customer email",
            field="email",
            invalid_value=order_id,
            error_code=ErrorCode.MISSING_EMAIL,
            **kwargs,
        )


class NoEligibleItemsException(ValidationException):
    """Todos los artículos de la orden fueron filtrados."""

    def __init__(self, total_items: int = 0, **kwargs):
        super().__init__(
            message="No valid line items to sync after filtering",
            field="line_items",
            invalid_value=total_items,
            error_code=ErrorCode.NO_ELIGIBLE_ITEMS,
            **kwargs,
        )


class PrintavoAPIException(AppException):
    """
    Excepción para errores de la API de Printavo.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        errors: Optional[List[Any]] = None,
        api_response_code: Optional[int] = None,
        rate_limited: bool = False,
        error_code: ErrorCode = ErrorCode.PRINTAVO_API_ERROR,
        **kwargs,
    ):
        """
        Inicializa la excepción de Printavo API.

        Args:
            message: Mensaje de error
            operation: Operación GraphQL que falló
            errors: Errores de campo devueltos por la API
            api_response_code: Código HTTP de la respuesta
            rate_limited: Si es por rate limiting
            error_code: Código de error específico
            **kwargs: Argumentos adicionales para AppException
        """
        if rate_limited:
            error_code = ErrorCode.RATE_LIMIT_EXCEEDED
            severity = ErrorSeverity.LOW
        elif api_response_code and api_response_code >= 500:
            severity = ErrorSeverity.HIGH
        else:
            severity = ErrorSeverity.MEDIUM

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=502,
            severity=severity,
            is_retryable=rate_limited or bool(api_response_code and api_response_code >= 500),
            **kwargs,
        )
        self.operation = operation
        self.errors = errors or []
        self.api_response_code = api_response_code
        self.rate_limited = rate_limited

        self.details.update(
            {
                "operation": operation,
                "errors": self.errors,
                "api_response_code": api_response_code,
                "rate_limited": rate_limited,
            }
        )


class ContactCreationFailedException(PrintavoAPIException):
    """customerCreate devolvió errores o no devolvió un contacto."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None, **kwargs):
        super().__init__(
            message=message,
            operation="customerCreate",
            errors=errors,
            error_code=ErrorCode.CONTACT_CREATION_FAILED,
            **kwargs,
        )


class QuoteCreationFailedException(PrintavoAPIException):
    """quoteCreate devolvió errores o no devolvió la cotización."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None, **kwargs):
        super().__init__(
            message=message,
            operation="quoteCreate",
            errors=errors,
            error_code=ErrorCode.QUOTE_CREATION_FAILED,
            **kwargs,
        )


class DatabaseException(AppException):
    """
    Excepción para errores de la base de datos local.
    """

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.DATABASE_ERROR,
            status_code=503,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            **kwargs,
        )
        self.operation = operation
        self.details.update({"operation": operation})


# === FUNCIONES DE UTILIDAD ===


def create_error_response(exception: Union[AppException, Exception], include_traceback: bool = False) -> Dict[str, Any]:
    """
    Crea respuesta de error estandardizada.

    Args:
        exception: Excepción a convertir
        include_traceback: Si incluir traceback

    Returns:
        Dict: Respuesta de error
    """
    if isinstance(exception, AppException):
        error_dict = exception.to_dict()
    else:
        error_dict = AppException(
            message=f"{type(exception).__name__}: {exception}",
            details={"original_exception": type(exception).__name__},
        ).to_dict()

    if not include_traceback:
        error_dict.pop("traceback", None)

    return {"error": True, **error_dict}


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Loggea un error de manera consistente.

    Args:
        exception: Excepción a loggear
        context: Contexto adicional
        level: Nivel de logging
    """
    context = context or {}

    log_data = {
        "exception_type": type(exception).__name__,
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
                "is_retryable": exception.is_retryable,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"
        log_data["traceback"] = "".join(
            traceback.format_exception(type(exception), exception, exception.__traceback__)
        )

    logger.log(level, message, extra=log_data)
