import pytest
from httpx import AsyncClient
from fastapi import status
from sqlalchemy.orm import Session

from soporte.core.config import settings
from soporte.models.notificacion import Notificacion
from soporte.models.ticket import Ticket
from soporte.models.usuario import Estudiante

from conftest import auth_headers

# Marcar todos los tests en este módulo para usar asyncio
pytestmark = pytest.mark.asyncio

NOTIFICACIONES_URL = f"{settings.API_V1_STR}/notificaciones"


async def _asignar(client: AsyncClient, token: str, ticket: Ticket) -> None:
    response = await client.post(f"{settings.API_V1_STR}/tickets/{ticket.id}/asignar", headers=auth_headers(token))
    assert response.status_code == status.HTTP_200_OK, response.text


async def test_assignment_notifies_requester(
    client: AsyncClient, auth_token_ciberseguridad: str, auth_token_estudiante: str, test_ticket_correo: Ticket
):
    await _asignar(client, auth_token_ciberseguridad, test_ticket_correo)

    response = await client.get(f"{NOTIFICACIONES_URL}/", headers=auth_headers(auth_token_estudiante))
    assert response.status_code == status.HTTP_200_OK
    notificaciones = response.json()
    assert len(notificaciones) == 1
    notif = notificaciones[0]
    assert notif["tipo"] == "asignado"
    assert notif["leido"] is False
    assert notif["referencia_id"] == str(test_ticket_correo.id)
    assert notif["referencia_numero"] == "000001"
    assert notif["mensaje"].startswith("[#000001] Técnico Asignado:")


async def test_staff_does_not_receive_requester_notifications(
    client: AsyncClient, auth_token_ciberseguridad: str, test_ticket_correo: Ticket
):
    await _asignar(client, auth_token_ciberseguridad, test_ticket_correo)
    response = await client.get(f"{NOTIFICACIONES_URL}/", headers=auth_headers(auth_token_ciberseguridad))
    assert response.json() == []


async def test_unread_count_and_mark_all(
    client: AsyncClient, auth_token_ciberseguridad: str, auth_token_estudiante: str, test_ticket_correo: Ticket
):
    await _asignar(client, auth_token_ciberseguridad, test_ticket_correo)
    await client.put(
        f"{settings.API_V1_STR}/tickets/{test_ticket_correo.id}/estado",
        headers=auth_headers(auth_token_ciberseguridad),
        json={"estado": "Resuelto"},
    )

    count = await client.get(f"{NOTIFICACIONES_URL}/count/unread", headers=auth_headers(auth_token_estudiante))
    assert count.json() == {"count": 2}

    marked = await client.post(f"{NOTIFICACIONES_URL}/marcar-todas-leidas", headers=auth_headers(auth_token_estudiante))
    assert marked.status_code == status.HTTP_200_OK

    count = await client.get(f"{NOTIFICACIONES_URL}/count/unread", headers=auth_headers(auth_token_estudiante))
    assert count.json() == {"count": 0}


async def test_solo_no_leidas_filter(
    client: AsyncClient, db: Session, auth_token_estudiante: str, test_estudiante: Estudiante
):
    leida = Notificacion(usuario_id=test_estudiante.id, mensaje="Leída", leido=True)
    no_leida = Notificacion(usuario_id=test_estudiante.id, mensaje="Pendiente", leido=False)
    db.add_all([leida, no_leida])
    db.commit()

    response = await client.get(
        f"{NOTIFICACIONES_URL}/", headers=auth_headers(auth_token_estudiante), params={"solo_no_leidas": "true"}
    )
    assert [n["mensaje"] for n in response.json()] == ["Pendiente"]


async def test_mark_one_and_unmark(
    client: AsyncClient, db: Session, auth_token_estudiante: str, test_estudiante: Estudiante
):
    notif = Notificacion(usuario_id=test_estudiante.id, mensaje="Aviso", leido=False)
    db.add(notif)
    db.commit()

    url = f"{NOTIFICACIONES_URL}/{notif.id}/marcar"
    read = await client.put(url, headers=auth_headers(auth_token_estudiante), json={"leido": True})
    assert read.status_code == status.HTTP_200_OK, read.text
    assert read.json()["leido"] is True
    assert read.json()["fecha_leido"] is not None

    unread = await client.put(url, headers=auth_headers(auth_token_estudiante), json={"leido": False})
    assert unread.json()["leido"] is False
    assert unread.json()["fecha_leido"] is None


async def test_cannot_mark_someone_elses_notification(
    client: AsyncClient, db: Session, auth_token_otro_estudiante: str, test_estudiante: Estudiante
):
    notif = Notificacion(usuario_id=test_estudiante.id, mensaje="Privada", leido=False)
    db.add(notif)
    db.commit()

    response = await client.put(
        f"{NOTIFICACIONES_URL}/{notif.id}/marcar", headers=auth_headers(auth_token_otro_estudiante), json={"leido": True}
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
