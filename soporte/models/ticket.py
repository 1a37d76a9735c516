import datetime
import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from soporte.core.config import settings
from soporte.db.base import Base, enum_column
from soporte.schemas.enums import CategoriaTicketEnum, EstadoTicketEnum, PrioridadTicketEnum

if TYPE_CHECKING:
    from .nota_ticket import NotaTicket


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Ticket(Base):
    """
    Modelo ORM para la tabla 'tickets'.

    Los datos del solicitante se copian al crear el ticket; el ticket conserva su
    historial aunque la cuenta del solicitante se elimine después.
    """
    __tablename__ = "tickets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    numero: Mapped[int] = mapped_column(Integer, unique=True, index=True)

    solicitante_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True)
    solicitante_nombre: Mapped[str] = mapped_column(String(200))
    solicitante_email: Mapped[str] = mapped_column(String(255))
    solicitante_matricula: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    titulo: Mapped[str] = mapped_column(String(200))
    descripcion: Mapped[str] = mapped_column(Text)
    categoria: Mapped[CategoriaTicketEnum] = mapped_column(enum_column(CategoriaTicketEnum), index=True)
    estado: Mapped[EstadoTicketEnum] = mapped_column(
        enum_column(EstadoTicketEnum, 20), default=EstadoTicketEnum.ABIERTO, index=True
    )
    prioridad: Mapped[PrioridadTicketEnum] = mapped_column(
        enum_column(PrioridadTicketEnum, 10), default=PrioridadTicketEnum.MEDIA
    )
    tipo_problema: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)

    asignado_a: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    asignado_nombre: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    resuelto_en: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resuelto_por: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    resuelto_por_nombre: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    notas: Mapped[List["NotaTicket"]] = relationship(
        "NotaTicket",
        back_populates="ticket",
        order_by="NotaTicket.id",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def numero_display(self) -> str:
        return str(self.numero).zfill(settings.TICKET_NUMBER_WIDTH)

    def __repr__(self) -> str:
        return f"<Ticket(numero={self.numero_display}, categoria='{self.categoria}', estado='{self.estado}')>"
