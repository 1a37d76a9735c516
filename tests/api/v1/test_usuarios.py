import pytest
from uuid import uuid4
from httpx import AsyncClient
from fastapi import status
from sqlalchemy.orm import Session

from soporte.core.config import settings
from soporte.core.security import create_access_token
from soporte.models.usuario import Estudiante, Personal, Usuario

from conftest import auth_headers, get_auth_token

pytestmark = pytest.mark.asyncio

USUARIOS_URL = f"{settings.API_V1_STR}/usuarios"


def _nuevo_personal(**overrides) -> dict:
    data = {
        "nombre": "Nuevo",
        "apellido": "Técnico",
        "email": "nuevo.tecnico@itla.edu.do",
        "password": "Tecnico2024",
        "rol": "CIBERSEGURIDAD",
        "cedula": "001-0000010-1",
        "edad": 29,
        "categorias_asignadas": ["EMAIL_PASS", "SOFTWARE"],
    }
    data.update(overrides)
    return data


async def test_read_me(client: AsyncClient, auth_token_estudiante: str, test_estudiante: Estudiante):
    response = await client.get(f"{USUARIOS_URL}/me", headers=auth_headers(auth_token_estudiante))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id"] == str(test_estudiante.id)
    assert data["matricula"] == "2023-0123"
    assert data["categorias_asignadas"] == []


async def test_update_me_estudiante(client: AsyncClient, auth_token_estudiante: str):
    response = await client.put(
        f"{USUARIOS_URL}/me",
        headers=auth_headers(auth_token_estudiante),
        json={"nombre": "Juan Carlos", "telefono": "829-555-9999", "carrera": "Multimedia"},
    )
    assert response.status_code == status.HTTP_200_OK, response.text
    data = response.json()
    assert data["nombre"] == "Juan Carlos"
    assert data["telefono"] == "829-555-9999"
    assert data["carrera"] == "Multimedia"
    assert data["rol"] == "STUDENT"


async def test_update_me_personal_ignores_student_fields(
    client: AsyncClient, auth_token_ciberseguridad: str, db: Session, test_ciberseguridad: Personal
):
    response = await client.put(
        f"{USUARIOS_URL}/me",
        headers=auth_headers(auth_token_ciberseguridad),
        json={"apellido": "Cibernética", "carrera": "No aplica"},
    )
    assert response.status_code == status.HTTP_200_OK
    db.refresh(test_ciberseguridad)
    assert test_ciberseguridad.apellido == "Cibernética"
    assert response.json()["carrera"] is None


async def test_roles_creables_por_rol(
    client: AsyncClient, auth_token_supremo: str, auth_token_globalizador: str, auth_token_estudiante: str
):
    supremo = await client.get(f"{USUARIOS_URL}/roles-creables", headers=auth_headers(auth_token_supremo))
    globalizador = await client.get(f"{USUARIOS_URL}/roles-creables", headers=auth_headers(auth_token_globalizador))
    estudiante = await client.get(f"{USUARIOS_URL}/roles-creables", headers=auth_headers(auth_token_estudiante))

    assert "SUPREMO_DIGITAL" in supremo.json()
    assert "STUDENT" not in supremo.json()
    assert len(supremo.json()) == 7
    assert "SUPREMO_DIGITAL" not in globalizador.json()
    assert "GLOBALIZADOR" in globalizador.json()
    assert estudiante.json() == []


async def test_list_usuarios_requires_manager(
    client: AsyncClient, auth_token_supremo: str, auth_token_ciberseguridad: str,
    test_estudiante: Estudiante,
):
    ok = await client.get(f"{USUARIOS_URL}/", headers=auth_headers(auth_token_supremo))
    assert ok.status_code == status.HTTP_200_OK
    emails = {u["email"] for u in ok.json()}
    assert {"supremo@itla.edu.do", "ciberseguridad@itla.edu.do", "juan.perez@itla.edu.do"} <= emails

    solo_estudiantes = await client.get(
        f"{USUARIOS_URL}/", headers=auth_headers(auth_token_supremo), params={"personal": "false"}
    )
    assert {u["rol"] for u in solo_estudiantes.json()} == {"STUDENT"}

    denied = await client.get(f"{USUARIOS_URL}/", headers=auth_headers(auth_token_ciberseguridad))
    assert denied.status_code == status.HTTP_403_FORBIDDEN


async def test_create_personal_success(client: AsyncClient, auth_token_supremo: str):
    response = await client.post(
        f"{USUARIOS_URL}/personal", headers=auth_headers(auth_token_supremo), json=_nuevo_personal()
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    data = response.json()
    assert data["rol"] == "CIBERSEGURIDAD"
    assert data["tipo"] == "personal"
    assert data["categorias_asignadas"] == ["EMAIL_PASS", "SOFTWARE"]

    assert await get_auth_token(client, "nuevo.tecnico@itla.edu.do", "Tecnico2024") is not None


async def test_globalizador_cannot_create_supremo(client: AsyncClient, auth_token_globalizador: str):
    response = await client.post(
        f"{USUARIOS_URL}/personal",
        headers=auth_headers(auth_token_globalizador),
        json=_nuevo_personal(rol="SUPREMO_DIGITAL"),
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


async def test_department_staff_cannot_create_accounts(client: AsyncClient, auth_token_ciberseguridad: str):
    response = await client.post(
        f"{USUARIOS_URL}/personal", headers=auth_headers(auth_token_ciberseguridad), json=_nuevo_personal()
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


async def test_create_personal_password_over_bcrypt_limit(client: AsyncClient, auth_token_supremo: str):
    response = await client.post(
        f"{USUARIOS_URL}/personal",
        headers=auth_headers(auth_token_supremo),
        json=_nuevo_personal(password="Tecnico2024" * 7),
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


async def test_create_personal_duplicate_email(
    client: AsyncClient, auth_token_supremo: str, test_ciberseguridad: Personal
):
    response = await client.post(
        f"{USUARIOS_URL}/personal",
        headers=auth_headers(auth_token_supremo),
        json=_nuevo_personal(email="CiberSeguridad@itla.edu.do"),
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


async def test_update_categorias_replaces_set(
    client: AsyncClient, auth_token_globalizador: str, test_operaciones: Personal
):
    response = await client.put(
        f"{USUARIOS_URL}/{test_operaciones.id}/categorias",
        headers=auth_headers(auth_token_globalizador),
        json={"categorias": ["SOFTWARE", "REDES", "SOFTWARE"]},
    )
    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()["categorias_asignadas"] == ["REDES", "SOFTWARE"]


async def test_update_categorias_denied_for_department(
    client: AsyncClient, auth_token_ciberseguridad: str, test_operaciones: Personal
):
    response = await client.put(
        f"{USUARIOS_URL}/{test_operaciones.id}/categorias",
        headers=auth_headers(auth_token_ciberseguridad),
        json={"categorias": ["EMAIL_PASS"]},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


async def test_update_categorias_student_target_rejected(
    client: AsyncClient, auth_token_supremo: str, test_estudiante: Estudiante
):
    response = await client.put(
        f"{USUARIOS_URL}/{test_estudiante.id}/categorias",
        headers=auth_headers(auth_token_supremo),
        json={"categorias": ["EMAIL_PASS"]},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


async def test_supremo_deletes_department_staff(
    client: AsyncClient, auth_token_supremo: str, test_ciberseguridad: Personal, db: Session
):
    user_id = test_ciberseguridad.id
    response = await client.delete(f"{USUARIOS_URL}/{user_id}", headers=auth_headers(auth_token_supremo))
    assert response.status_code == status.HTTP_200_OK, response.text
    db.expire_all()
    assert db.get(Usuario, user_id) is None


async def test_department_staff_cannot_delete_supremo(
    client: AsyncClient, auth_token_ciberseguridad: str, test_supremo: Personal, db: Session
):
    response = await client.delete(f"{USUARIOS_URL}/{test_supremo.id}", headers=auth_headers(auth_token_ciberseguridad))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    db.expire_all()
    assert db.get(Usuario, test_supremo.id) is not None


async def test_globalizador_cannot_delete_higher_level(
    client: AsyncClient, auth_token_globalizador: str, test_supremo: Personal
):
    response = await client.delete(f"{USUARIOS_URL}/{test_supremo.id}", headers=auth_headers(auth_token_globalizador))
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.parametrize("user_fixture", ["test_supremo", "test_globalizador", "test_ciberseguridad", "test_estudiante"])
async def test_self_deletion_always_denied(client: AsyncClient, request, user_fixture: str):
    user = request.getfixturevalue(user_fixture)
    token = create_access_token(subject=user.id, role=user.rol.value)
    response = await client.delete(f"{USUARIOS_URL}/{user.id}", headers=auth_headers(token))
    assert response.status_code == status.HTTP_403_FORBIDDEN


async def test_delete_unknown_user(client: AsyncClient, auth_token_supremo: str):
    response = await client.delete(f"{USUARIOS_URL}/{uuid4()}", headers=auth_headers(auth_token_supremo))
    assert response.status_code == status.HTTP_404_NOT_FOUND
