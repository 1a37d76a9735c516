import logging
from typing import Any, List
from uuid import UUID as PyUUID

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError

from soporte.api import deps
from soporte.core.exceptions import SoporteError, StoreUnavailableError
from soporte.models.usuario import Usuario as UsuarioModel
from soporte.schemas.common import Msg
from soporte.schemas.notificacion import Notificacion, NotificacionUpdate, NotificacionesNoLeidas
from soporte.services.notificacion import notificacion_service

logger = logging.getLogger(__name__)
router = APIRouter()

# Cada usuario solo accede a su propia bandeja; no hay permisos de rol involucrados.

@router.get("/",
            response_model=List[Notificacion],
            summary="Listar Notificaciones del Usuario Actual")
def read_notificaciones_usuario_actual(
    db: Session = Depends(deps.get_db),
    current_user: UsuarioModel = Depends(deps.get_current_user),
    solo_no_leidas: bool = Query(False, description="Mostrar solo las notificaciones no leídas"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
) -> Any:
    logger.info(f"Usuario '{current_user.email}' listando sus notificaciones (SoloNoLeidas: {solo_no_leidas}).")
    return notificacion_service.get_multi_by_user(
        db,
        usuario_id=current_user.id,
        solo_no_leidas=solo_no_leidas,
        skip=skip,
        limit=limit
    )

@router.get("/count/unread",
            response_model=NotificacionesNoLeidas,
            summary="Contar Notificaciones No Leídas del Usuario Actual")
def count_notificaciones_no_leidas(
    db: Session = Depends(deps.get_db),
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    return {"count": notificacion_service.get_unread_count_by_user(db, usuario_id=current_user.id)}

@router.post("/marcar-todas-leidas",
             response_model=Msg,
             summary="Marcar todas las Notificaciones del Usuario Actual como Leídas")
def mark_all_notificaciones_as_read(
    db: Session = Depends(deps.get_db),
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    try:
        affected_rows = notificacion_service.mark_all_as_read_for_user(db, usuario_id=current_user.id)
        if affected_rows > 0:
            db.commit()
        return {"msg": f"{affected_rows} notificación(es) marcada(s) como leída(s)."}
    except OperationalError as e:
        db.rollback()
        raise StoreUnavailableError() from e
    except Exception as e:
        db.rollback()
        logger.error(f"Error al marcar todas las notificaciones como leídas para '{current_user.email}': {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error interno al marcar las notificaciones como leídas.")

@router.put("/{notificacion_id}/marcar",
            response_model=Notificacion,
            summary="Marcar una Notificación como Leída/No Leída")
def mark_notificacion(
    *,
    db: Session = Depends(deps.get_db),
    notificacion_id: PyUUID,
    update_in: NotificacionUpdate,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    """Solo el usuario propietario de la notificación puede marcarla."""
    try:
        db_notificacion = notificacion_service.get_for_user_or_404(
            db, notificacion_id=notificacion_id, usuario_id=current_user.id
        )
        updated = notificacion_service.mark_as(db, db_obj=db_notificacion, read_status=update_in.leido)
        db.commit()
        db.refresh(updated)
        return updated
    except SoporteError:
        db.rollback()
        raise
    except OperationalError as e:
        db.rollback()
        raise StoreUnavailableError() from e
    except Exception as e:
        db.rollback()
        logger.error(f"Error al marcar la notificación {notificacion_id}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error interno al actualizar la notificación.")
