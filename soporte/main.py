import logging
import os

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from starlette.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from soporte.core.config import settings
from soporte.api.routes import api_router
from soporte.core.logging_config import setup_logging
from soporte.core.error_handlers import register_error_handlers
from soporte.db.session import engine

setup_logging(log_to_file=settings.LOG_TO_FILE)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("*"*50)
    logger.info(f"Iniciando Aplicación: {settings.PROJECT_NAME}")
    logger.info("*"*50)

    PORT = os.getenv("PORT", "8086")
    BASE_URL = f"http://127.0.0.1:{PORT}"
    logger.info(f"API Docs (Swagger UI): {BASE_URL}{settings.API_V1_STR}/docs")
    logger.info(f"API Docs (ReDoc):      {BASE_URL}{settings.API_V1_STR}/redoc")
    logger.info("*"*50)

    yield

    logger.info("*"*50)
    logger.info(f"Deteniendo Aplicación: {settings.PROJECT_NAME}")
    logger.info("*"*50)

# --- Crear Instancia de FastAPI ---
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API del Sistema de Soporte Estudiantil: solicitudes, asignación por categorías y seguimiento de casos.",
    version="1.0.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    lifespan=lifespan
)

# --- Configurar CORS ---
if settings.BACKEND_CORS_ORIGINS:
    logger.info(f"Configurando CORS para los orígenes: {settings.BACKEND_CORS_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    logger.warning("CORS no configurado (BACKEND_CORS_ORIGINS no definido en .env)")

# --- Registrar Manejadores de Errores ---
register_error_handlers(app)

# --- Incluir Routers de la API ---
app.include_router(api_router, prefix=settings.API_V1_STR)
logger.info(f"Routers de API incluidos bajo el prefijo: {settings.API_V1_STR}")

@app.get("/", tags=["Root"], include_in_schema=False)
def read_root() -> dict:
    return {"status": "ok", "message": f"Bienvenido a {settings.PROJECT_NAME}"}

@app.get("/health", tags=["Root"])
def health_check():
    """Comprueba que la base de datos responde."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except OperationalError as e:
        logger.error(f"Health check: base de datos no disponible: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "database": "unavailable"},
        )
    return {"status": "ok", "database": "ok"}
