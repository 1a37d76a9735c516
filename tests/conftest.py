import os

# La configuración se lee al importar soporte.core.config: definir antes de cualquier import del proyecto
os.environ["DATABASE_URI"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_TO_FILE"] = "false"
os.environ["SECRET_KEY"] = "clave-de-pruebas"
os.environ["INSTITUTIONAL_EMAIL_DOMAIN"] = "itla.edu.do"

import json
import logging
from typing import AsyncGenerator, Generator, Iterable, Optional

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from soporte.main import app as fastapi_app
from soporte.core.config import settings
from soporte.api.deps import get_db  # Usado para override
from soporte.core.password import get_password_hash
from soporte.db.base import Base
from soporte.models import Estudiante, Personal, Ticket  # noqa
from soporte.schemas.enums import CategoriaTicketEnum, PrioridadTicketEnum, RolUsuarioEnum
from soporte.schemas.ticket import TicketCreate
from soporte.services.ticket import ticket_service

# Configuración básica de logging para los tests
logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] [%(name)s] [%(funcName)s] %(message)s')
logger = logging.getLogger(__name__)

# Una sola conexión en memoria compartida por el hilo del test y el threadpool de FastAPI
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Contraseñas de prueba
TEST_STAFF_PASSWORD = "PersonalPass123"
TEST_STUDENT_PASSWORD = "EstudiantePass123"


@pytest.fixture(scope="session")
def app() -> FastAPI:
    """
    Fixture que proporciona la instancia de la aplicación FastAPI para los tests.
    """
    return fastapi_app


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Sesión sobre un esquema recién creado para cada test."""
    Base.metadata.create_all(bind=engine)
    db_session = TestingSessionLocal()
    try:
        yield db_session
    finally:
        db_session.close()
        Base.metadata.drop_all(bind=engine)


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI, db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Fixture para obtener un cliente HTTP asíncrono para interactuar con la app."""
    def override_get_db_for_test():
        yield db

    app.dependency_overrides[get_db] = override_get_db_for_test
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


async def get_auth_token(client: AsyncClient, username: str, password: str) -> Optional[str]:
    """Función helper para obtener un token de autenticación."""
    login_data = {"username": username, "password": password}
    url = f"{settings.API_V1_STR}/auth/login/access-token"
    try:
        response = await client.post(url, data=login_data)
        response.raise_for_status()
        return response.json().get("access_token")
    except httpx.HTTPStatusError as e:
        try:
            error_detail = e.response.json()
        except json.JSONDecodeError:
            error_detail = e.response.text
        logger.error(f"FALLO al obtener token para '{username}': Status={e.response.status_code}. Detail: {error_detail}")
        return None


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ==============================================================================
# USUARIOS
# ==============================================================================
def crear_personal(
    db: Session,
    email: str,
    rol: RolUsuarioEnum,
    categorias: Iterable[CategoriaTicketEnum] = (),
    nombre: str = "Personal",
    apellido: Optional[str] = "Prueba",
) -> Personal:
    user = Personal(
        nombre=nombre,
        apellido=apellido,
        email=email,
        rol=rol,
        hashed_password=get_password_hash(TEST_STAFF_PASSWORD),
        categorias_asignadas=sorted(c.value for c in categorias),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def crear_estudiante(db: Session, email: str, nombre: str = "Juan", matricula: str = "2023-0123") -> Estudiante:
    user = Estudiante(
        nombre=nombre,
        apellido="Pérez",
        email=email,
        rol=RolUsuarioEnum.STUDENT,
        hashed_password=get_password_hash(TEST_STUDENT_PASSWORD),
        matricula=matricula,
        email_personal="juan.perez@gmail.com",
        telefono="809-555-1234",
        carrera="Desarrollo de Software",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def test_supremo(db: Session) -> Personal:
    return crear_personal(
        db, "supremo@itla.edu.do", RolUsuarioEnum.SUPREMO_DIGITAL, list(CategoriaTicketEnum),
        nombre="Carlos", apellido="Supremo",
    )


@pytest.fixture(scope="function")
def test_globalizador(db: Session) -> Personal:
    return crear_personal(
        db, "globalizador@itla.edu.do", RolUsuarioEnum.GLOBALIZADOR, list(CategoriaTicketEnum),
        nombre="María", apellido="Global",
    )


@pytest.fixture(scope="function")
def test_ciberseguridad(db: Session) -> Personal:
    """Personal de departamento con la categoría EMAIL_PASS."""
    return crear_personal(
        db, "ciberseguridad@itla.edu.do", RolUsuarioEnum.CIBERSEGURIDAD, [CategoriaTicketEnum.EMAIL_PASS],
        nombre="Rosa", apellido="Cyber",
    )


@pytest.fixture(scope="function")
def test_operaciones(db: Session) -> Personal:
    """Personal de departamento con REDES y EQUIPOS."""
    return crear_personal(
        db, "operaciones@itla.edu.do", RolUsuarioEnum.OPERACIONES_TICS,
        [CategoriaTicketEnum.REDES, CategoriaTicketEnum.EQUIPOS],
        nombre="Pedro", apellido="Operaciones",
    )


@pytest.fixture(scope="function")
def test_pasante(db: Session) -> Personal:
    """Pasante sin categorías asignadas."""
    return crear_personal(db, "pasante@itla.edu.do", RolUsuarioEnum.PASANTES, nombre="Miguel", apellido="Pasante")


@pytest.fixture(scope="function")
def test_estudiante(db: Session) -> Estudiante:
    return crear_estudiante(db, "juan.perez@itla.edu.do")


@pytest.fixture(scope="function")
def test_otro_estudiante(db: Session) -> Estudiante:
    return crear_estudiante(db, "ana.gomez@itla.edu.do", nombre="Ana", matricula="2024-0456")


# ==============================================================================
# TOKENS
# ==============================================================================
@pytest_asyncio.fixture(scope="function")
async def auth_token_supremo(client: AsyncClient, test_supremo: Personal) -> str:
    token = await get_auth_token(client, test_supremo.email, TEST_STAFF_PASSWORD)
    if not token:
        pytest.fail(f"No se pudo obtener token para '{test_supremo.email}'.")
    return token


@pytest_asyncio.fixture(scope="function")
async def auth_token_globalizador(client: AsyncClient, test_globalizador: Personal) -> str:
    token = await get_auth_token(client, test_globalizador.email, TEST_STAFF_PASSWORD)
    if not token:
        pytest.fail(f"No se pudo obtener token para '{test_globalizador.email}'.")
    return token


@pytest_asyncio.fixture(scope="function")
async def auth_token_ciberseguridad(client: AsyncClient, test_ciberseguridad: Personal) -> str:
    token = await get_auth_token(client, test_ciberseguridad.email, TEST_STAFF_PASSWORD)
    if not token:
        pytest.fail(f"No se pudo obtener token para '{test_ciberseguridad.email}'.")
    return token


@pytest_asyncio.fixture(scope="function")
async def auth_token_operaciones(client: AsyncClient, test_operaciones: Personal) -> str:
    token = await get_auth_token(client, test_operaciones.email, TEST_STAFF_PASSWORD)
    if not token:
        pytest.fail(f"No se pudo obtener token para '{test_operaciones.email}'.")
    return token


@pytest_asyncio.fixture(scope="function")
async def auth_token_estudiante(client: AsyncClient, test_estudiante: Estudiante) -> str:
    token = await get_auth_token(client, test_estudiante.email, TEST_STUDENT_PASSWORD)
    if not token:
        pytest.fail(f"No se pudo obtener token para '{test_estudiante.email}'.")
    return token


@pytest_asyncio.fixture(scope="function")
async def auth_token_otro_estudiante(client: AsyncClient, test_otro_estudiante: Estudiante) -> str:
    token = await get_auth_token(client, test_otro_estudiante.email, TEST_STUDENT_PASSWORD)
    if not token:
        pytest.fail(f"No se pudo obtener token para '{test_otro_estudiante.email}'.")
    return token


# ==============================================================================
# TICKETS
# ==============================================================================
def crear_ticket(
    db: Session,
    requester,
    categoria: CategoriaTicketEnum,
    titulo: str = "Solicitud de prueba",
    descripcion: str = "Descripción de la solicitud de prueba.",
    prioridad: Optional[PrioridadTicketEnum] = PrioridadTicketEnum.MEDIA,
) -> Ticket:
    ticket = ticket_service.create(
        db,
        obj_in=TicketCreate(titulo=titulo, descripcion=descripcion, categoria=categoria, prioridad=prioridad),
        requester=requester,
    )
    db.commit()
    db.refresh(ticket)
    return ticket


@pytest.fixture(scope="function")
def test_ticket_correo(db: Session, test_estudiante: Estudiante) -> Ticket:
    return crear_ticket(
        db, test_estudiante, CategoriaTicketEnum.EMAIL_PASS,
        titulo="No puedo acceder a mi correo institucional",
    )


@pytest.fixture(scope="function")
def test_ticket_redes(db: Session, test_estudiante: Estudiante) -> Ticket:
    return crear_ticket(db, test_estudiante, CategoriaTicketEnum.REDES, titulo="Sin conexión al WiFi del campus")
