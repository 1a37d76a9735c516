import pytest

from soporte.schemas.enums import CategoriaTicketEnum, PrioridadTicketEnum
from soporte.services.triage import RESPUESTAS_CATEGORIA, TIEMPO_URGENTE, analizar_ticket


def test_every_category_has_a_response():
    assert set(RESPUESTAS_CATEGORIA) == set(CategoriaTicketEnum)


def test_urgent_keywords_raise_priority():
    sugerencia = analizar_ticket("Tengo examen mañana y no puedo entrar a SIGEI", CategoriaTicketEnum.SIGEI_PASS)
    assert sugerencia.prioridad == PrioridadTicketEnum.ALTA
    assert sugerencia.tiempo_estimado == TIEMPO_URGENTE
    assert sugerencia.mensaje.startswith("PRIORIDAD ALTA:")


def test_low_priority_keywords():
    sugerencia = analizar_ticket("Una consulta sobre el software del laboratorio", CategoriaTicketEnum.SOFTWARE)
    assert sugerencia.prioridad == PrioridadTicketEnum.BAJA


def test_urgent_wins_over_low_priority():
    sugerencia = analizar_ticket("Una pregunta URGENTE sobre mi correo", CategoriaTicketEnum.EMAIL_PASS)
    assert sugerencia.prioridad == PrioridadTicketEnum.ALTA


@pytest.mark.parametrize("categoria", list(CategoriaTicketEnum))
def test_default_is_media_with_category_tips(categoria):
    sugerencia = analizar_ticket("El sistema muestra un mensaje extraño", categoria)
    assert sugerencia.prioridad == PrioridadTicketEnum.MEDIA
    assert sugerencia.consejos == RESPUESTAS_CATEGORIA[categoria][2]
    assert sugerencia.tiempo_estimado == RESPUESTAS_CATEGORIA[categoria][1]
