"""
Filtro de acceso a tickets.

Funciones puras derivadas de la tabla de roles: no consultan la base de datos ni
modifican nada. `visible_tickets_clause` expresa la misma regla de visibilidad
como filtro SQL para las consultas paginadas.
"""
from typing import Iterable, List

from sqlalchemy import or_, true
from sqlalchemy.sql.elements import ColumnElement

from soporte.core import roles
from soporte.models.ticket import Ticket
from soporte.models.usuario import Usuario


def can_view_ticket_in_list(user: Usuario, ticket: Ticket) -> bool:
    if roles.can_view_all_tickets(user.rol):
        return True
    if not roles.is_staff(user.rol):
        return ticket.solicitante_id == user.id
    return ticket.categoria in user.categorias or ticket.asignado_a == user.id


def visible_tickets(user: Usuario, tickets: Iterable[Ticket]) -> List[Ticket]:
    """
    - Ver-todo: todos los tickets.
    - Estudiante: solo los que solicitó.
    - Personal: los de sus categorías asignadas más los que tiene asignados.
    Conserva el orden de entrada.
    """
    return [t for t in tickets if can_view_ticket_in_list(user, t)]


def can_manage(user: Usuario, ticket: Ticket) -> bool:
    """Puede cambiar estado, transferir o resolver: ver-todo o técnico asignado."""
    return roles.can_view_all_tickets(user.rol) or (
        ticket.asignado_a is not None and ticket.asignado_a == user.id
    )


def can_see_single_ticket(user: Usuario, ticket: Ticket) -> bool:
    if can_manage(user, ticket):
        return True
    if ticket.solicitante_id == user.id:
        return True
    return roles.is_staff(user.rol) and ticket.categoria in user.categorias


def visible_tickets_clause(user: Usuario) -> ColumnElement[bool]:
    if roles.can_view_all_tickets(user.rol):
        return true()
    if not roles.is_staff(user.rol):
        return Ticket.solicitante_id == user.id
    categorias = sorted(user.categorias, key=lambda c: c.value)
    condiciones = [Ticket.asignado_a == user.id]
    if categorias:
        condiciones.append(Ticket.categoria.in_(categorias))
    return or_(*condiciones)
