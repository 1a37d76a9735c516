from .nota_ticket import NotaTicket
from .notificacion import Notificacion
from .secuencia import Secuencia
from .ticket import Ticket
from .usuario import Estudiante, Personal, Usuario


__all__ = [
    "Estudiante",
    "NotaTicket",
    "Notificacion",
    "Personal",
    "Secuencia",
    "Ticket",
    "Usuario",
]
