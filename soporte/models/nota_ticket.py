import datetime
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship, Mapped, mapped_column

from soporte.db.base import Base

if TYPE_CHECKING:
    from .ticket import Ticket

# Autor reservado para las notas generadas por el sistema
SISTEMA_AUTOR_ID = uuid.UUID(int=0)
SISTEMA_AUTOR_NOMBRE = "Sistema"


class NotaTicket(Base):
    """
    Modelo ORM para la tabla 'notas_ticket'. Las notas solo se agregan; no se editan ni eliminan
    (salvo en cascada al eliminar el ticket). El orden es el del `id` autoincremental.
    """
    __tablename__ = "notas_ticket"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticket_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tickets.id", ondelete="CASCADE"), index=True)
    texto: Mapped[str] = mapped_column(Text)
    autor_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    autor_nombre: Mapped[str] = mapped_column(String(200))
    autor_rol: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    ticket: Mapped["Ticket"] = relationship("Ticket", back_populates="notas")

    @hybrid_property
    def es_sistema(self) -> bool:
        return self.autor_id == SISTEMA_AUTOR_ID

    def __repr__(self) -> str:
        return f"<NotaTicket(id={self.id}, ticket_id={self.ticket_id}, autor='{self.autor_nombre}')>"
