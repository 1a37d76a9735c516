import logging

from sqlalchemy.orm import Session

from soporte.models.ticket import Ticket
from soporte.models.usuario import Usuario
from soporte.schemas.dashboard import DashboardData

from .notificacion import notificacion_service
from .ticket import ticket_service

logger = logging.getLogger(__name__)

class DashboardService:
    def get_summary(self, db: Session, *, user: Usuario) -> DashboardData:
        """Resumen calculado siempre sobre los tickets que `user` puede ver."""
        logger.info(f"Obteniendo resumen de dashboard para '{user.email}'.")

        stats = ticket_service.get_stats(db, user=user)
        por_categoria = ticket_service.count_visible_by(db, user=user, column=Ticket.categoria)
        por_prioridad = ticket_service.count_visible_by(db, user=user, column=Ticket.prioridad)
        no_leidas = notificacion_service.get_unread_count_by_user(db, usuario_id=user.id)

        logger.debug(f"Dashboard '{user.email}': total={stats.total}, por_categoria={por_categoria}")
        return DashboardData(
            stats=stats,
            por_categoria=por_categoria,
            por_prioridad=por_prioridad,
            notificaciones_no_leidas=no_leidas,
        )

dashboard_service = DashboardService()
