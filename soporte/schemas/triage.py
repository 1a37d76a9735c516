from typing import List

from pydantic import BaseModel, Field

from .enums import CategoriaTicketEnum, PrioridadTicketEnum


class TriageRequest(BaseModel):
    descripcion: str = Field(..., min_length=1)
    categoria: CategoriaTicketEnum


class SugerenciaTriage(BaseModel):
    """Sugerencia orientativa; el ticket es válido sin ella."""
    prioridad: PrioridadTicketEnum
    mensaje: str
    tiempo_estimado: str
    consejos: List[str] = []
