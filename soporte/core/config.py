import os
import json
from typing import List, Union, Optional, Any
from pydantic import Field, field_validator, PostgresDsn, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    """
    Configuraciones de la aplicación, leídas desde variables de entorno.
    """
    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # --- Configuración General del Proyecto ---
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Soporte Estudiantil API")
    API_V1_STR: str = os.getenv("API_V1_STR", "/api/v1")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "cambiar-esta-clave-en-produccion")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

    # --- Configuración de Base de Datos ---
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "soporte_estudiantil")
    DATABASE_DRIVER: str = os.getenv("DATABASE_DRIVER", "psycopg")

    # Si se define DATABASE_URI se usa tal cual (ej: sqlite para pruebas locales)
    DATABASE_URI: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("DATABASE_URI", mode='before')
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str) and v:
            return v

        driver = info.data.get("DATABASE_DRIVER", "psycopg")
        scheme = f"postgresql+{driver}"

        return str(PostgresDsn.build(
            scheme=scheme,
            username=info.data.get("POSTGRES_USER"),
            password=info.data.get("POSTGRES_PASSWORD"),
            host=info.data.get("POSTGRES_SERVER"),
            port=int(info.data.get("POSTGRES_PORT", 5432)),
            path=f"{info.data.get('POSTGRES_DB') or ''}",
        ))

    # --- Configuración de CORS ---
    BACKEND_CORS_ORIGINS: List[str] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and v:
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        elif isinstance(v, list):
            return v
        return []

    # --- Reglas de negocio ---
    INSTITUTIONAL_EMAIL_DOMAIN: str = os.getenv("INSTITUTIONAL_EMAIL_DOMAIN", "itla.edu.do")
    TICKET_NUMBER_WIDTH: int = int(os.getenv("TICKET_NUMBER_WIDTH", "6"))

    # --- Seguridad ---
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOGS_DIRECTORY: str = os.getenv("LOGS_DIRECTORY", "logs")
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "true").lower() in ("1", "true", "yes")

    # --- Credenciales para el Superusuario Inicial ---
    SUPERUSER_EMAIL: Optional[str] = os.getenv("SUPERUSER_EMAIL")
    SUPERUSER_PASSWORD: Optional[str] = os.getenv("SUPERUSER_PASSWORD")

    # --- Contraseña común para los datos de demostración (scripts/manage_cli.py seed) ---
    DEMO_PASSWORD: str = os.getenv("DEMO_PASSWORD", "Itla2024!")

settings = Settings()
