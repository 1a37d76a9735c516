import logging
import traceback

from fastapi import FastAPI, Request, status, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError, InterfaceError, NoResultFound

from soporte.core.exceptions import SoporteError, StoreUnavailableError

logger = logging.getLogger(__name__)

# Segundos sugeridos al cliente antes de reintentar cuando la base de datos no responde
RETRY_AFTER_SECONDS = "5"


async def soporte_exception_handler(request: Request, exc: Exception):
    """
    Traduce los errores de negocio a respuestas HTTP.
    El cuerpo siempre es `{"detail": ...}` para que el cliente muestre el mensaje tal cual.
    """
    if not isinstance(exc, SoporteError):
        return await generic_exception_handler(request, exc)

    log_message = f"{type(exc).__name__} - Status: {exc.status_code}, Detail: {exc.detail}, Request: {request.method} {request.url}"
    headers = None
    if exc.retryable:
        logger.error(log_message)
        headers = {"Retry-After": RETRY_AFTER_SECONDS}
    else:
        logger.warning(log_message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


async def validation_exception_handler(request: Request, exc: Exception):
    """
    Manejador para errores de validación de Pydantic en las solicitudes.
    """
    if not isinstance(exc, RequestValidationError):
        return await generic_exception_handler(request, exc)

    error_details = []
    for error in exc.errors():
        field_loc = error.get("loc", ["body"])
        if field_loc and field_loc[0] == 'body' and len(field_loc) > 1:
            field = " -> ".join(map(str, field_loc[1:]))
        else:
            field = " -> ".join(map(str, field_loc))
        message = error.get("msg", "Error de validación")
        error_details.append({"field": field, "message": message})
    logger.warning(f"Error de Validación en Request: {request.method} {request.url} - Errores: {error_details}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Error de validación en los datos de entrada.", "errors": error_details},
    )


async def http_exception_handler(request: Request, exc: Exception):
    """
    Manejador para excepciones HTTP explícitas lanzadas en la aplicación.
    """
    if not isinstance(exc, HTTPException):
        return await generic_exception_handler(request, exc)

    log_message = f"HTTPException - Status: {exc.status_code}, Detail: {exc.detail}, Request: {request.method} {request.url}"
    if exc.status_code >= 500:
        logger.error(log_message, exc_info=False)
    elif exc.status_code >= 400:
        logger.warning(log_message)
    else:
        logger.info(log_message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def database_exception_handler(request: Request, exc: Exception):
    """
    Manejador para errores de SQLAlchemy que escaparon de la capa de rutas.

    Un fallo de conexión se reporta como StoreUnavailable (503 con Retry-After);
    nunca se expone el mensaje del driver al cliente.
    """
    if not isinstance(exc, SQLAlchemyError):
        return await generic_exception_handler(request, exc)

    original_exc = getattr(exc, 'orig', None)
    logger.error(
        f"Database Error Handler - Type: {type(original_exc).__name__ if original_exc else type(exc).__name__}, "
        f"Request: {request.method} {request.url}",
        exc_info=True
    )

    if isinstance(exc, (OperationalError, InterfaceError)):
        return await soporte_exception_handler(request, StoreUnavailableError())
    if isinstance(exc, IntegrityError):
        user_message = "Conflicto: ya existe un registro con datos que deben ser únicos."
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, NoResultFound):
        user_message = "El recurso solicitado no fue encontrado."
        status_code = status.HTTP_404_NOT_FOUND
    else:
        user_message = "Ocurrió un error interno del servidor al procesar la solicitud de base de datos."
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    logger.info(f"DB Handler: Mapeando error DB a -> Status={status_code}, Detail='{user_message}'")
    return JSONResponse(status_code=status_code, content={"detail": user_message})


async def generic_exception_handler(request: Request, exc: Exception):
    """
    Manejador genérico para cualquier excepción no capturada por otros manejadores.
    """
    log_message = f"Unhandled Python Exception: {type(exc).__name__} - {exc}, Request: {request.method} {request.url}\n{traceback.format_exc()}"
    logger.critical(log_message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Ocurrió un error interno inesperado en la aplicación."},
    )


def register_error_handlers(app: FastAPI):
    """Registra todos los manejadores de excepciones personalizados en la app FastAPI."""
    app.add_exception_handler(SoporteError, soporte_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
    logger.info("Manejadores de errores personalizados registrados.")
