import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError

from soporte.api import deps
from soporte.core.exceptions import StoreUnavailableError
from soporte.models.usuario import Usuario as UsuarioModel
from soporte.schemas.dashboard import DashboardData, TicketStats
from soporte.services.dashboard import dashboard_service
from soporte.services.ticket import ticket_service

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get(
    "/",
    response_model=DashboardData,
    summary="Obtener Datos Resumen del Dashboard",
)
def get_dashboard_data(
    db: Session = Depends(deps.get_db),
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    """Resumen de tickets calculado sobre lo que el usuario actual puede ver."""
    try:
        return dashboard_service.get_summary(db, user=current_user)
    except OperationalError as e:
        logger.error(f"Base de datos no disponible al calcular el dashboard: {e}")
        raise StoreUnavailableError() from e

@router.get("/stats", response_model=TicketStats, summary="Estadísticas de tickets visibles")
def get_ticket_stats(
    db: Session = Depends(deps.get_db),
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    try:
        return ticket_service.get_stats(db, user=current_user)
    except OperationalError as e:
        raise StoreUnavailableError() from e
