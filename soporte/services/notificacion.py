import logging
from typing import List, Optional
from uuid import UUID
from datetime import datetime, timezone

from sqlalchemy.orm import Session
from sqlalchemy import select, update, func as sql_func

from soporte.core.exceptions import NotFoundError, ValidationError
from soporte.models.notificacion import Notificacion
from soporte.models.ticket import Ticket
from soporte.models.usuario import Usuario
from soporte.schemas.notificacion import NotificacionUpdate, NotificacionCreateInternal
from .base_service import BaseService
from .mensajes import mensaje_solicitante

logger = logging.getLogger(__name__)

class NotificacionService(BaseService[Notificacion, NotificacionCreateInternal, NotificacionUpdate]):

    def create_internal(self, db: Session, *, obj_in: NotificacionCreateInternal) -> Notificacion:
        logger.debug(f"Creando notificación interna para Usuario ID: {obj_in.usuario_id}, Mensaje: '{obj_in.mensaje[:30]}...'")
        if not obj_in.mensaje.strip():
            raise ValidationError("El mensaje de la notificación no puede estar vacío.")

        db_notificacion = super().create(db, obj_in=obj_in)
        db_notificacion.leido = False
        logger.info(f"Notificación interna para Usuario ID {db_notificacion.usuario_id} preparada para ser creada.")
        return db_notificacion

    def notify_requester(self, db: Session, *, ticket: Ticket, evento: str) -> Optional[Notificacion]:
        """Avisa al solicitante de un cambio en su ticket, dentro de la misma transacción."""
        if db.get(Usuario, ticket.solicitante_id) is None:
            logger.info(f"Ticket #{ticket.numero_display}: el solicitante ya no existe, no se notifica '{evento}'.")
            return None
        tipo, mensaje = mensaje_solicitante(evento, ticket.numero_display)
        return self.create_internal(
            db,
            obj_in=NotificacionCreateInternal(
                usuario_id=ticket.solicitante_id,
                mensaje=mensaje,
                tipo=tipo,
                referencia_id=ticket.id,
                referencia_numero=ticket.numero_display,
            ),
        )

    def get_for_user_or_404(self, db: Session, *, notificacion_id: UUID, usuario_id: UUID) -> Notificacion:
        """Un usuario solo ve sus propias notificaciones; las ajenas se reportan como inexistentes."""
        db_obj = self.get(db, id=notificacion_id)
        if not db_obj or db_obj.usuario_id != usuario_id:
            logger.warning(f"Notificación {notificacion_id} no encontrada para usuario {usuario_id}.")
            raise NotFoundError("Notificación no encontrada.")
        return db_obj

    def mark_as(self, db: Session, *, db_obj: Notificacion, read_status: bool) -> Notificacion:
        notif_id = db_obj.id
        if db_obj.leido == read_status:
            logger.debug(f"Notificación ID {notif_id} ya está en estado leido={read_status}. No se realizan cambios.")
            return db_obj

        db_obj.leido = read_status
        db_obj.fecha_leido = datetime.now(timezone.utc) if read_status else None
        db.add(db_obj)
        logger.info(f"Notificación ID {notif_id} preparada para ser actualizada a leido={read_status}.")
        return db_obj

    def mark_all_as_read_for_user(self, db: Session, *, usuario_id: UUID) -> int:
        statement = (
            update(self.model)
            .where(self.model.usuario_id == usuario_id, self.model.leido.is_(False))
            .values(leido=True, fecha_leido=datetime.now(timezone.utc))
        )
        affected_rows = db.execute(statement).rowcount
        logger.info(f"{affected_rows} notificación(es) para Usuario ID {usuario_id} preparadas para ser marcadas como leídas.")
        return affected_rows

    def get_multi_by_user(
        self, db: Session, *, usuario_id: UUID, solo_no_leidas: bool = False, skip: int = 0, limit: int = 50
    ) -> List[Notificacion]:
        statement = select(self.model).where(self.model.usuario_id == usuario_id)
        if solo_no_leidas:
            statement = statement.where(self.model.leido.is_(False))
        statement = statement.order_by(self.model.created_at.desc()).offset(skip).limit(limit)
        return list(db.execute(statement).scalars().all())

    def get_unread_count_by_user(self, db: Session, *, usuario_id: UUID) -> int:
        statement = select(sql_func.count(self.model.id)).where(
            self.model.usuario_id == usuario_id,
            self.model.leido.is_(False),
        )
        return db.execute(statement).scalar_one_or_none() or 0

notificacion_service = NotificacionService(Notificacion)
