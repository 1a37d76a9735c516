import datetime
import uuid
from typing import TYPE_CHECKING, FrozenSet, List, Optional

from sqlalchemy import DateTime, Integer, JSON, String, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from soporte.db.base import Base, enum_column
from soporte.schemas.enums import CategoriaTicketEnum, RolUsuarioEnum, TipoUsuarioEnum

if TYPE_CHECKING:
    from .notificacion import Notificacion


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Usuario(Base):
    """
    Modelo ORM para la tabla 'usuarios'.

    Herencia de tabla única: la columna `tipo` distingue entre `Estudiante` y `Personal`.
    Los campos propios de cada subtipo son nulos para el otro.
    """
    __tablename__ = "usuarios"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tipo: Mapped[TipoUsuarioEnum] = mapped_column(enum_column(TipoUsuarioEnum, 20), index=True)
    nombre: Mapped[str] = mapped_column(String(100))
    apellido: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    rol: Mapped[RolUsuarioEnum] = mapped_column(enum_column(RolUsuarioEnum), index=True)
    hashed_password: Mapped[str] = mapped_column("contrasena", String)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    notificaciones: Mapped[List["Notificacion"]] = relationship(
        "Notificacion",
        back_populates="usuario",
        lazy="select",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"polymorphic_on": "tipo"}

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre} {self.apellido}".strip() if self.apellido else self.nombre

    @property
    def categorias(self) -> FrozenSet[CategoriaTicketEnum]:
        """Categorías asignadas. Solo el personal tiene; para el resto es vacío."""
        return frozenset()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, email='{self.email}', rol='{self.rol}')>"


class Estudiante(Usuario):
    matricula: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    email_personal: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    telefono: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    carrera: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)

    __mapper_args__ = {"polymorphic_identity": TipoUsuarioEnum.ESTUDIANTE}


class Personal(Usuario):
    """
    Cuenta de personal (cualquier rol distinto de STUDENT).
    `categorias_asignadas` se reemplaza completo en cada asignación, nunca se modifica en sitio.
    """
    cedula: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    edad: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    categorias_asignadas: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True, default=list)

    __mapper_args__ = {"polymorphic_identity": TipoUsuarioEnum.PERSONAL}

    @property
    def categorias(self) -> FrozenSet[CategoriaTicketEnum]:
        return frozenset(CategoriaTicketEnum(c) for c in (self.categorias_asignadas or []))
