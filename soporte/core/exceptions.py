"""
Excepciones de dominio.

Los servicios las lanzan cuando se viola una regla de negocio; nunca dejan el
estado modificado (la sesión se descarta con rollback en la capa de ruta).
`soporte.core.error_handlers` las traduce a respuestas HTTP.
"""
from fastapi import status


class SoporteError(Exception):
    """Base de todos los errores de negocio del sistema."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    retryable: bool = False

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(SoporteError):
    """Entrada inválida: texto vacío, valor fuera del enum, email duplicado."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class PermissionDeniedError(SoporteError):
    """El actor no tiene la capacidad o relación necesaria con el objetivo."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(SoporteError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(SoporteError):
    """Carrera perdida: por ejemplo, el ticket ya fue tomado por otro técnico."""
    status_code = status.HTTP_409_CONFLICT


class StoreUnavailableError(SoporteError):
    """La base de datos no está disponible. Es el único error que admite reintento."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True

    def __init__(self, detail: str = "El servicio no está disponible en este momento. Intente nuevamente."):
        super().__init__(detail)
