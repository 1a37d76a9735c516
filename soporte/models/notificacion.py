import uuid
from typing import TYPE_CHECKING, Optional
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from soporte.db.base import Base, enum_column
from soporte.schemas.enums import TipoNotificacionEnum

if TYPE_CHECKING:
    from .usuario import Usuario


class Notificacion(Base):
    """
    Modelo ORM para la tabla 'notificaciones'.
    """
    __tablename__ = "notificaciones"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    usuario_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("usuarios.id", ondelete="CASCADE"), index=True)
    mensaje: Mapped[str] = mapped_column(Text)
    tipo: Mapped[TipoNotificacionEnum] = mapped_column(
        enum_column(TipoNotificacionEnum, 20), default=TipoNotificacionEnum.INFO, index=True
    )
    leido: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )
    fecha_leido: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # Ticket al que se refiere (sin FK: la notificación sobrevive al ticket eliminado)
    referencia_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    referencia_numero: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    usuario: Mapped["Usuario"] = relationship(
        "Usuario",
        back_populates="notificaciones",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        leido_str = "Leído" if self.leido else "No leído"
        return f"<Notificacion(id={self.id}, usuario_id={self.usuario_id}, tipo='{self.tipo}', estado='{leido_str}')>"
