import pytest
from httpx import AsyncClient
from fastapi import status

from soporte.core.config import settings
from soporte.core.events import canal_eventos
from soporte.models.ticket import Ticket

from conftest import auth_headers

pytestmark = pytest.mark.asyncio

DASHBOARD_URL = f"{settings.API_V1_STR}/dashboard"


async def test_dashboard_super_role(
    client: AsyncClient, auth_token_supremo: str, test_ticket_correo: Ticket, test_ticket_redes: Ticket
):
    response = await client.get(f"{DASHBOARD_URL}/", headers=auth_headers(auth_token_supremo))
    assert response.status_code == status.HTTP_200_OK, response.text
    data = response.json()
    assert data["stats"]["total"] == 2
    assert data["stats"]["abiertos"] == 2
    assert data["stats"]["creados_hoy"] == 2
    assert data["por_categoria"] == {"EMAIL_PASS": 1, "REDES": 1}
    assert data["por_prioridad"] == {"Media": 2}
    assert data["notificaciones_no_leidas"] == 0


async def test_dashboard_scoped_to_visible_tickets(
    client: AsyncClient, auth_token_ciberseguridad: str, test_ticket_correo: Ticket, test_ticket_redes: Ticket
):
    response = await client.get(f"{DASHBOARD_URL}/", headers=auth_headers(auth_token_ciberseguridad))
    data = response.json()
    assert data["stats"]["total"] == 1
    assert data["por_categoria"] == {"EMAIL_PASS": 1}


async def test_stats_after_resolution(
    client: AsyncClient, auth_token_supremo: str, test_ticket_correo: Ticket
):
    headers = auth_headers(auth_token_supremo)
    await client.put(
        f"{settings.API_V1_STR}/tickets/{test_ticket_correo.id}/estado", headers=headers, json={"estado": "Resuelto"}
    )
    response = await client.get(f"{DASHBOARD_URL}/stats", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    stats = response.json()
    assert stats["resueltos"] == 1
    assert stats["resueltos_hoy"] == 1
    assert stats["abiertos"] == 0


async def test_event_versions_advance_on_commit(
    client: AsyncClient, auth_token_estudiante: str
):
    headers = auth_headers(auth_token_estudiante)
    antes = (await client.get(f"{settings.API_V1_STR}/eventos/version", headers=headers)).json()

    await client.post(
        f"{settings.API_V1_STR}/tickets/",
        headers=headers,
        json={"titulo": "Impresora", "descripcion": "La impresora del aula no responde.", "categoria": "EQUIPOS", "prioridad": "Baja"},
    )
    despues = (await client.get(f"{settings.API_V1_STR}/eventos/version", headers=headers)).json()

    assert despues["tickets"] == antes["tickets"] + 1
    assert despues["usuarios"] == antes["usuarios"]
    assert canal_eventos.version("tickets") == despues["tickets"]


async def test_event_versions_unchanged_on_failed_mutation(
    client: AsyncClient, auth_token_estudiante: str, test_ticket_correo: Ticket
):
    headers = auth_headers(auth_token_estudiante)
    antes = canal_eventos.version("tickets")
    response = await client.post(f"{settings.API_V1_STR}/tickets/{test_ticket_correo.id}/asignar", headers=headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert canal_eventos.version("tickets") == antes


async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"
