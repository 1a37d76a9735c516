import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session
from sqlalchemy import func, insert, select, update

from soporte.core import access, roles
from soporte.core.events import TOPIC_TICKETS, queue_event
from soporte.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from soporte.models.nota_ticket import NotaTicket, SISTEMA_AUTOR_ID, SISTEMA_AUTOR_NOMBRE
from soporte.models.secuencia import Secuencia, SECUENCIA_TICKETS
from soporte.models.ticket import Ticket
from soporte.models.usuario import Estudiante, Usuario
from soporte.schemas.dashboard import TicketStats
from soporte.schemas.enums import (
    CategoriaTicketEnum,
    ETIQUETAS_CATEGORIA,
    EstadoTicketEnum,
    PrioridadTicketEnum,
)
from soporte.schemas.ticket import TicketCreate

from . import mensajes
from .base_service import BaseService
from .notificacion import notificacion_service
from .triage import analizar_ticket

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite devuelve fechas sin zona horaria; se interpretan como UTC."""
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)


class TicketService(BaseService[Ticket, TicketCreate, TicketCreate]):
    """
    Almacén de tickets y su máquina de estados.

    Cada operación compuesta (cambio + nota de sistema + notificación al solicitante)
    se aplica en la sesión recibida; el commit lo hace la ruta una sola vez.
    """

    # --- Numeración ---

    def _next_numero(self, db: Session) -> int:
        """
        Incrementa el contador persistente en la transacción actual. El UPDATE
        bloquea la fila hasta el commit, así dos creaciones no obtienen el mismo número.
        """
        result = db.execute(
            update(Secuencia)
            .where(Secuencia.nombre == SECUENCIA_TICKETS)
            .values(valor=Secuencia.valor + 1)
        )
        if result.rowcount == 0:
            db.execute(insert(Secuencia).values(nombre=SECUENCIA_TICKETS, valor=1))
            return 1
        return db.execute(
            select(Secuencia.valor).where(Secuencia.nombre == SECUENCIA_TICKETS)
        ).scalar_one()

    # --- Helpers internos ---

    def _get_ticket(self, db: Session, ticket_id: UUID) -> Ticket:
        ticket = self.get(db, id=ticket_id)
        if ticket is None:
            logger.warning(f"Ticket {ticket_id} no encontrado.")
            raise NotFoundError("Ticket no encontrado.")
        return ticket

    def _require_manage(self, actor: Usuario, ticket: Ticket, accion: str) -> None:
        if not access.can_manage(actor, ticket):
            logger.warning(
                f"Usuario '{actor.email}' ({actor.rol.value}) sin permiso para {accion} el ticket #{ticket.numero_display}."
            )
            raise PermissionDeniedError(f"No tiene permiso para {accion} este ticket.")

    def _append_note(
        self, ticket: Ticket, *, texto: str, autor_id: UUID, autor_nombre: str, autor_rol: Optional[str]
    ) -> NotaTicket:
        nota = NotaTicket(texto=texto, autor_id=autor_id, autor_nombre=autor_nombre, autor_rol=autor_rol)
        ticket.notas.append(nota)
        return nota

    def _append_system_note(self, ticket: Ticket, accion: str, actor: Usuario, detalle: Optional[str] = None) -> NotaTicket:
        return self._append_note(
            ticket,
            texto=mensajes.nota_sistema(accion, actor.nombre_completo, detalle),
            autor_id=SISTEMA_AUTOR_ID,
            autor_nombre=SISTEMA_AUTOR_NOMBRE,
            autor_rol=None,
        )

    def _touch(self, db: Session, ticket: Ticket, accion: str) -> None:
        ticket.updated_at = _utcnow()
        db.add(ticket)
        queue_event(db, TOPIC_TICKETS, {"accion": accion, "ticket_id": str(ticket.id)})

    @staticmethod
    def _clear_resolution(ticket: Ticket) -> None:
        ticket.resuelto_en = None
        ticket.resuelto_por = None
        ticket.resuelto_por_nombre = None

    # --- Mutaciones ---

    def create(self, db: Session, *, obj_in: TicketCreate, requester: Usuario) -> Ticket:  # type: ignore[override]
        """
        Crea un ticket en estado Abierto sin notas. Si no se indica prioridad se usa
        la sugerencia del análisis automático.
        NO realiza db.commit().
        """
        prioridad = obj_in.prioridad
        if prioridad is None:
            prioridad = analizar_ticket(obj_in.descripcion, obj_in.categoria).prioridad

        ahora = _utcnow()
        ticket = Ticket(
            numero=self._next_numero(db),
            solicitante_id=requester.id,
            solicitante_nombre=requester.nombre_completo,
            solicitante_email=requester.email,
            solicitante_matricula=requester.matricula if isinstance(requester, Estudiante) else None,
            titulo=obj_in.titulo,
            descripcion=obj_in.descripcion,
            categoria=obj_in.categoria,
            estado=EstadoTicketEnum.ABIERTO,
            prioridad=prioridad or PrioridadTicketEnum.MEDIA,
            tipo_problema=obj_in.tipo_problema,
            created_at=ahora,
            updated_at=ahora,
        )
        db.add(ticket)
        db.flush()
        queue_event(db, TOPIC_TICKETS, {"accion": "creado", "ticket_id": str(ticket.id)})
        logger.info(
            f"Ticket #{ticket.numero_display} ({ticket.categoria.value}, {ticket.prioridad.value}) "
            f"preparado para creación por '{requester.email}'."
        )
        return ticket

    def set_status(self, db: Session, *, ticket_id: UUID, new_status: EstadoTicketEnum, actor: Usuario) -> Ticket:
        ticket = self._get_ticket(db, ticket_id)
        self._require_manage(actor, ticket, "cambiar el estado de")
        new_status = EstadoTicketEnum(new_status)
        anterior = ticket.estado

        ticket.estado = new_status
        if new_status == EstadoTicketEnum.RESUELTO:
            ticket.resuelto_en = _utcnow()
            ticket.resuelto_por = actor.id
            ticket.resuelto_por_nombre = actor.nombre_completo
            self._append_system_note(ticket, mensajes.ACCION_RESUELTO, actor)
            evento = "resolved"
        elif new_status == EstadoTicketEnum.CERRADO:
            self._append_system_note(ticket, mensajes.ACCION_CERRADO, actor)
            evento = "closed"
        else:
            self._clear_resolution(ticket)
            self._append_system_note(ticket, mensajes.ACCION_CAMBIO_ESTADO, actor, new_status.value)
            evento = "inProgress" if new_status == EstadoTicketEnum.EN_PROCESO else "open"

        notificacion_service.notify_requester(db, ticket=ticket, evento=evento)
        self._touch(db, ticket, "estado")
        logger.info(
            f"Ticket #{ticket.numero_display}: estado {anterior.value} -> {new_status.value} por '{actor.email}'."
        )
        return ticket

    def assign(self, db: Session, *, ticket_id: UUID, actor: Usuario) -> Ticket:
        """
        El técnico toma el ticket. La asignación es un UPDATE condicionado a que
        `asignado_a` siga vacío: si otro técnico lo tomó antes, no se modifica nada.
        """
        if not roles.is_staff(actor.rol):
            logger.warning(f"Usuario '{actor.email}' (no personal) intentó tomar el ticket {ticket_id}.")
            raise PermissionDeniedError("Solo el personal de soporte puede tomar tickets.")
        ticket = self._get_ticket(db, ticket_id)

        ahora = _utcnow()
        result = db.execute(
            update(Ticket)
            .where(Ticket.id == ticket.id, Ticket.asignado_a.is_(None))
            .values(
                asignado_a=actor.id,
                asignado_nombre=actor.nombre_completo,
                estado=EstadoTicketEnum.EN_PROCESO,
                updated_at=ahora,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.refresh(ticket)
            logger.warning(
                f"Ticket #{ticket.numero_display} ya asignado a '{ticket.asignado_nombre}'; '{actor.email}' no pudo tomarlo."
            )
            raise ConflictError("Este ticket ya fue tomado por otro miembro del personal.")

        db.refresh(ticket)
        self._clear_resolution(ticket)
        self._append_system_note(ticket, mensajes.ACCION_ASIGNADO, actor)
        notificacion_service.notify_requester(db, ticket=ticket, evento="assigned")
        self._touch(db, ticket, "asignado")
        logger.info(f"Ticket #{ticket.numero_display} asignado a '{actor.email}'.")
        return ticket

    def transfer(self, db: Session, *, ticket_id: UUID, new_category: CategoriaTicketEnum, actor: Usuario) -> Ticket:
        ticket = self._get_ticket(db, ticket_id)
        self._require_manage(actor, ticket, "transferir")
        new_category = CategoriaTicketEnum(new_category)
        anterior = ticket.categoria

        ticket.categoria = new_category
        ticket.asignado_a = None
        ticket.asignado_nombre = None
        ticket.estado = EstadoTicketEnum.ABIERTO
        self._clear_resolution(ticket)
        self._append_system_note(ticket, mensajes.ACCION_TRANSFERIDO, actor, ETIQUETAS_CATEGORIA[new_category])
        notificacion_service.notify_requester(db, ticket=ticket, evento="transferred")
        self._touch(db, ticket, "transferido")
        logger.info(
            f"Ticket #{ticket.numero_display} transferido de {anterior.value} a {new_category.value} por '{actor.email}'."
        )
        return ticket

    def add_note(self, db: Session, *, ticket_id: UUID, texto: str, actor: Usuario) -> NotaTicket:
        texto = (texto or "").strip()
        if not texto:
            raise ValidationError("La nota no puede estar vacía.")
        ticket = self._get_ticket(db, ticket_id)
        if not access.can_see_single_ticket(actor, ticket):
            logger.warning(f"Usuario '{actor.email}' intentó agregar una nota al ticket #{ticket.numero_display} sin acceso.")
            raise PermissionDeniedError("No tiene acceso a este ticket.")
        es_personal = roles.is_staff(actor.rol)
        if ticket.estado == EstadoTicketEnum.CERRADO and not es_personal:
            raise PermissionDeniedError("El caso está cerrado; cree una nueva solicitud si necesita más ayuda.")

        nota = self._append_note(
            ticket,
            texto=texto,
            autor_id=actor.id,
            autor_nombre=actor.nombre_completo,
            autor_rol=actor.rol.value,
        )
        if es_personal and actor.id != ticket.solicitante_id:
            notificacion_service.notify_requester(db, ticket=ticket, evento="note")
        self._touch(db, ticket, "nota")
        logger.info(f"Nota agregada al ticket #{ticket.numero_display} por '{actor.email}'.")
        return nota

    def set_priority(self, db: Session, *, ticket_id: UUID, prioridad: PrioridadTicketEnum, actor: Usuario) -> Ticket:
        ticket = self._get_ticket(db, ticket_id)
        if not roles.is_staff(actor.rol) or not access.can_see_single_ticket(actor, ticket):
            logger.warning(f"Usuario '{actor.email}' sin permiso para cambiar la prioridad del ticket {ticket_id}.")
            raise PermissionDeniedError("No tiene permiso para cambiar la prioridad de este ticket.")
        ticket.prioridad = PrioridadTicketEnum(prioridad)
        self._touch(db, ticket, "prioridad")
        logger.info(f"Ticket #{ticket.numero_display}: prioridad {ticket.prioridad.value} por '{actor.email}'.")
        return ticket

    def delete(self, db: Session, *, ticket_id: UUID, actor: Usuario) -> bool:
        if not roles.can_delete_tickets(actor.rol):
            logger.warning(f"Usuario '{actor.email}' ({actor.rol.value}) intentó eliminar el ticket {ticket_id}.")
            raise PermissionDeniedError("No tiene permiso para eliminar tickets.")
        ticket = self._get_ticket(db, ticket_id)
        numero = ticket.numero_display
        db.delete(ticket)
        queue_event(db, TOPIC_TICKETS, {"accion": "eliminado", "ticket_id": str(ticket_id)})
        logger.warning(f"Ticket #{numero} preparado para eliminación por '{actor.email}'.")
        return True

    # --- Consultas ---

    def get_visible_for(
        self, db: Session, *, user: Usuario, estado: Optional[EstadoTicketEnum] = None,
        categoria: Optional[CategoriaTicketEnum] = None, skip: int = 0, limit: int = 100
    ) -> List[Ticket]:
        """Tickets que `user` puede ver, más recientes primero."""
        statement = select(Ticket).where(access.visible_tickets_clause(user))
        if estado is not None:
            statement = statement.where(Ticket.estado == estado)
        if categoria is not None:
            statement = statement.where(Ticket.categoria == categoria)
        statement = statement.order_by(Ticket.numero.desc()).offset(skip).limit(limit)
        return list(db.execute(statement).scalars().all())

    def get_visible_or_raise(self, db: Session, *, ticket_id: UUID, user: Usuario) -> Ticket:
        """NotFoundError si el ticket no existe; PermissionDeniedError (403) si existe pero `user` no puede verlo."""
        ticket = self._get_ticket(db, ticket_id)
        if not access.can_see_single_ticket(user, ticket):
            logger.warning(f"Usuario '{user.email}' intentó ver el ticket #{ticket.numero_display} sin acceso.")
            raise PermissionDeniedError("No tiene acceso a este ticket.")
        return ticket

    def get_multi_by_requester(self, db: Session, *, requester_id: UUID) -> List[Ticket]:
        statement = select(Ticket).where(Ticket.solicitante_id == requester_id).order_by(Ticket.numero.desc())
        return list(db.execute(statement).scalars().all())

    def get_multi_by_status(self, db: Session, *, estado: EstadoTicketEnum) -> List[Ticket]:
        statement = select(Ticket).where(Ticket.estado == estado).order_by(Ticket.numero.desc())
        return list(db.execute(statement).scalars().all())

    def get_multi_by_category(self, db: Session, *, categoria: CategoriaTicketEnum) -> List[Ticket]:
        statement = select(Ticket).where(Ticket.categoria == categoria).order_by(Ticket.numero.desc())
        return list(db.execute(statement).scalars().all())

    def get_stats(self, db: Session, *, user: Usuario, now: Optional[datetime] = None) -> TicketStats:
        """Estadísticas sobre los tickets visibles para `user`. "Hoy" es el día UTC actual."""
        visibles = list(db.execute(select(Ticket).where(access.visible_tickets_clause(user))).scalars().all())
        hoy = (now or _utcnow()).astimezone(timezone.utc).date()

        por_estado: Dict[EstadoTicketEnum, int] = {estado: 0 for estado in EstadoTicketEnum}
        creados_hoy = resueltos_hoy = 0
        for ticket in visibles:
            por_estado[ticket.estado] += 1
            if _as_utc(ticket.created_at).date() == hoy:
                creados_hoy += 1
            resuelto_en = _as_utc(ticket.resuelto_en)
            if resuelto_en is not None and resuelto_en.date() == hoy:
                resueltos_hoy += 1

        return TicketStats(
            total=len(visibles),
            abiertos=por_estado[EstadoTicketEnum.ABIERTO],
            en_proceso=por_estado[EstadoTicketEnum.EN_PROCESO],
            resueltos=por_estado[EstadoTicketEnum.RESUELTO],
            cerrados=por_estado[EstadoTicketEnum.CERRADO],
            creados_hoy=creados_hoy,
            resueltos_hoy=resueltos_hoy,
        )

    def count_visible_by(self, db: Session, *, user: Usuario, column) -> Dict[str, int]:
        """Conteo de tickets visibles agrupado por `column` (categoría o prioridad)."""
        statement = (
            select(column, func.count(Ticket.id))
            .where(access.visible_tickets_clause(user))
            .group_by(column)
        )
        return {valor.value: total for valor, total in db.execute(statement).all()}

ticket_service = TicketService(Ticket)
