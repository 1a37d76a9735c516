from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from soporte.db.base import Base

SECUENCIA_TICKETS = "tickets"


class Secuencia(Base):
    """
    Contador persistente por nombre. Se incrementa dentro de la transacción que
    lo consume, por lo que un número nunca se reutiliza aunque se elimine su ticket.
    """
    __tablename__ = "secuencias"

    nombre: Mapped[str] = mapped_column(String(50), primary_key=True)
    valor: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<Secuencia(nombre='{self.nombre}', valor={self.valor})>"
