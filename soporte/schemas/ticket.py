import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from soporte.core.config import settings
from .enums import CategoriaTicketEnum, EstadoTicketEnum, PrioridadTicketEnum


# ===============================================================
# Notas
# ===============================================================
class NotaTicketCreate(BaseModel):
    texto: str = Field(..., max_length=5000, description="Texto de la nota (no puede quedar vacío)")


class NotaTicket(BaseModel):
    id: int
    texto: str
    autor_id: uuid.UUID
    autor_nombre: str
    autor_rol: Optional[str] = None
    es_sistema: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===============================================================
# Tickets - entrada
# ===============================================================
class TicketCreate(BaseModel):
    titulo: str = Field(..., min_length=1, max_length=200)
    descripcion: str = Field(..., min_length=1)
    categoria: CategoriaTicketEnum
    prioridad: Optional[PrioridadTicketEnum] = Field(
        None, description="Si no se indica se usa la sugerencia del análisis automático"
    )
    tipo_problema: Optional[str] = Field(None, max_length=150)

    @field_validator("titulo", "descripcion")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("El campo no puede estar vacío.")
        return v


class TicketEstadoUpdate(BaseModel):
    estado: EstadoTicketEnum


class TicketTransferencia(BaseModel):
    categoria: CategoriaTicketEnum


class TicketPrioridadUpdate(BaseModel):
    prioridad: PrioridadTicketEnum


# ===============================================================
# Tickets - respuesta
# ===============================================================
class TicketSimple(BaseModel):
    """Schema para listados: sin notas."""
    id: uuid.UUID
    numero: int
    titulo: str
    categoria: CategoriaTicketEnum
    estado: EstadoTicketEnum
    prioridad: PrioridadTicketEnum
    solicitante_id: uuid.UUID
    solicitante_nombre: str
    asignado_a: Optional[uuid.UUID] = None
    asignado_nombre: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def numero_display(self) -> str:
        return str(self.numero).zfill(settings.TICKET_NUMBER_WIDTH)


class Ticket(TicketSimple):
    descripcion: str
    tipo_problema: Optional[str] = None
    solicitante_email: str
    solicitante_matricula: Optional[str] = None
    resuelto_en: Optional[datetime] = None
    resuelto_por: Optional[uuid.UUID] = None
    resuelto_por_nombre: Optional[str] = None
    notas: List[NotaTicket] = []


class SolicitanteReporte(BaseModel):
    """Datos del perfil del solicitante para reportes externos."""
    nombre: str
    email: str
    matricula: Optional[str] = None
    telefono: Optional[str] = None
    email_personal: Optional[str] = None
    carrera: Optional[str] = None


class TicketReporte(BaseModel):
    """
    Ticket completo con su historial y el perfil del solicitante, listo para
    un formateador externo (PDF/texto). No aplica ningún formato.
    """
    ticket: Ticket
    solicitante: SolicitanteReporte
    categoria_label: str
    generado_en: datetime
