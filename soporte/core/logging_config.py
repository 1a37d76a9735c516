import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from datetime import datetime

from soporte.core.config import settings

LOG_LEVEL = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

# Formato de los logs
LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)-8s] [%(name)s] [%(process)d:%(threadName)s] [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def _build_file_handler() -> TimedRotatingFileHandler:
    logs_dir = Path(settings.LOGS_DIRECTORY)
    logs_dir.mkdir(parents=True, exist_ok=True)
    # Fecha en el nombre para no pisar archivos entre instancias
    log_filename = logs_dir / f"soporte_estudiantil_{datetime.now().strftime('%Y%m%d')}.log"
    handler = TimedRotatingFileHandler(
        filename=log_filename,
        when="midnight",
        interval=1,
        backupCount=14,
        encoding='utf-8',
        delay=True,
    )
    handler.setFormatter(formatter)
    handler.setLevel(LOG_LEVEL)
    return handler


def setup_logging(log_to_file: bool = True):
    """Configura los manejadores y el nivel para el logger raíz y loggers específicos."""
    root_logger = logging.getLogger()
    root_logger.setLevel(LOG_LEVEL)
    # Limpiar handlers existentes para evitar duplicados con --reload
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(LOG_LEVEL)
    root_logger.addHandler(console_handler)

    file_handler = None
    if log_to_file:
        file_handler = _build_file_handler()
        root_logger.addHandler(file_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.ERROR)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    root_logger.info("="*50)
    root_logger.info("Configuración de Logging Iniciada")
    root_logger.info(f"Nivel de Log: {logging.getLevelName(LOG_LEVEL)}")
    if file_handler is not None:
        root_logger.info(f"Archivo de Log: {file_handler.baseFilename}")
    root_logger.info("="*50)
