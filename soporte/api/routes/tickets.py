import logging
from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import UUID as PyUUID

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError

from soporte.api import deps
from soporte.core.exceptions import SoporteError, StoreUnavailableError
from soporte.models import Estudiante, Usuario as UsuarioModel
from soporte.schemas import (
    Msg,
    NotaTicket,
    NotaTicketCreate,
    SolicitanteReporte,
    SugerenciaTriage,
    Ticket,
    TicketCreate,
    TicketEstadoUpdate,
    TicketPrioridadUpdate,
    TicketReporte,
    TicketSimple,
    TicketTransferencia,
    TriageRequest,
)
from soporte.schemas.enums import CategoriaTicketEnum, ETIQUETAS_CATEGORIA, EstadoTicketEnum
from soporte.services.ticket import ticket_service
from soporte.services.triage import analizar_ticket
from soporte.services.usuario import usuario_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _rollback_and_raise(db: Session, accion: str, e: Exception) -> None:
    """Rollback y traducción de errores inesperados comunes a las mutaciones de tickets."""
    db.rollback()
    if isinstance(e, SoporteError):
        raise e
    if isinstance(e, OperationalError):
        logger.error(f"Base de datos no disponible al {accion}: {e}")
        raise StoreUnavailableError() from e
    logger.error(f"Error inesperado al {accion}: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error interno al {accion}.")


@router.post("/analizar", response_model=SugerenciaTriage, summary="Sugerir prioridad para una solicitud")
def analizar_solicitud(
    triage_in: TriageRequest,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    return analizar_ticket(triage_in.descripcion, triage_in.categoria)


@router.post("/", response_model=Ticket, status_code=status.HTTP_201_CREATED, summary="Crear un ticket")
def create_ticket(
    *,
    db: Session = Depends(deps.get_db),
    ticket_in: TicketCreate,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    logger.info(f"Usuario '{current_user.email}' creando ticket en categoría {ticket_in.categoria.value}.")
    try:
        ticket = ticket_service.create(db, obj_in=ticket_in, requester=current_user)
        db.commit()
        db.refresh(ticket)
        return ticket
    except Exception as e:
        _rollback_and_raise(db, "crear el ticket", e)


@router.get("/", response_model=List[TicketSimple], summary="Listar tickets visibles")
def read_tickets(
    db: Session = Depends(deps.get_db),
    estado: Optional[EstadoTicketEnum] = Query(None),
    categoria: Optional[CategoriaTicketEnum] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    """
    Lista los tickets que el usuario actual puede ver: todos (roles con visión global),
    los propios (estudiantes) o los de sus categorías más los asignados (personal).
    """
    try:
        return ticket_service.get_visible_for(
            db, user=current_user, estado=estado, categoria=categoria, skip=skip, limit=limit
        )
    except OperationalError as e:
        raise StoreUnavailableError() from e


@router.get("/{ticket_id}", response_model=Ticket, summary="Obtener un ticket con sus notas")
def read_ticket(
    ticket_id: PyUUID,
    db: Session = Depends(deps.get_db),
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    return ticket_service.get_visible_or_raise(db, ticket_id=ticket_id, user=current_user)


@router.get("/{ticket_id}/reporte", response_model=TicketReporte, summary="Datos completos del ticket para reportes")
def read_ticket_reporte(
    ticket_id: PyUUID,
    db: Session = Depends(deps.get_db),
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    """Ticket, historial y perfil del solicitante. El formato (PDF, texto) queda a cargo del cliente."""
    ticket = ticket_service.get_visible_or_raise(db, ticket_id=ticket_id, user=current_user)
    solicitante = usuario_service.get(db, id=ticket.solicitante_id)
    es_estudiante = isinstance(solicitante, Estudiante)
    return TicketReporte(
        ticket=Ticket.model_validate(ticket),
        solicitante=SolicitanteReporte(
            nombre=ticket.solicitante_nombre,
            email=ticket.solicitante_email,
            matricula=ticket.solicitante_matricula,
            telefono=solicitante.telefono if es_estudiante else None,
            email_personal=solicitante.email_personal if es_estudiante else None,
            carrera=solicitante.carrera if es_estudiante else None,
        ),
        categoria_label=ETIQUETAS_CATEGORIA[ticket.categoria],
        generado_en=datetime.now(timezone.utc),
    )


@router.put("/{ticket_id}/estado", response_model=Ticket, summary="Cambiar el estado de un ticket")
def update_ticket_estado(
    *,
    db: Session = Depends(deps.get_db),
    ticket_id: PyUUID,
    estado_in: TicketEstadoUpdate,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    try:
        ticket = ticket_service.set_status(db, ticket_id=ticket_id, new_status=estado_in.estado, actor=current_user)
        db.commit()
        db.refresh(ticket)
        return ticket
    except Exception as e:
        _rollback_and_raise(db, "cambiar el estado del ticket", e)


@router.post("/{ticket_id}/asignar", response_model=Ticket, summary="Tomar un ticket")
def assign_ticket(
    *,
    db: Session = Depends(deps.get_db),
    ticket_id: PyUUID,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    """Asigna el ticket al usuario actual si nadie lo ha tomado todavía (409 en caso contrario)."""
    try:
        ticket = ticket_service.assign(db, ticket_id=ticket_id, actor=current_user)
        db.commit()
        db.refresh(ticket)
        return ticket
    except Exception as e:
        _rollback_and_raise(db, "asignar el ticket", e)


@router.post("/{ticket_id}/transferir", response_model=Ticket, summary="Transferir un ticket a otra categoría")
def transfer_ticket(
    *,
    db: Session = Depends(deps.get_db),
    ticket_id: PyUUID,
    transferencia_in: TicketTransferencia,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    try:
        ticket = ticket_service.transfer(
            db, ticket_id=ticket_id, new_category=transferencia_in.categoria, actor=current_user
        )
        db.commit()
        db.refresh(ticket)
        return ticket
    except Exception as e:
        _rollback_and_raise(db, "transferir el ticket", e)


@router.put("/{ticket_id}/prioridad", response_model=Ticket, summary="Cambiar la prioridad de un ticket")
def update_ticket_prioridad(
    *,
    db: Session = Depends(deps.get_db),
    ticket_id: PyUUID,
    prioridad_in: TicketPrioridadUpdate,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    try:
        ticket = ticket_service.set_priority(db, ticket_id=ticket_id, prioridad=prioridad_in.prioridad, actor=current_user)
        db.commit()
        db.refresh(ticket)
        return ticket
    except Exception as e:
        _rollback_and_raise(db, "cambiar la prioridad del ticket", e)


@router.post(
    "/{ticket_id}/notas",
    response_model=NotaTicket,
    status_code=status.HTTP_201_CREATED,
    summary="Agregar una nota al ticket",
)
def add_nota(
    *,
    db: Session = Depends(deps.get_db),
    ticket_id: PyUUID,
    nota_in: NotaTicketCreate,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    try:
        nota = ticket_service.add_note(db, ticket_id=ticket_id, texto=nota_in.texto, actor=current_user)
        db.commit()
        db.refresh(nota)
        return nota
    except Exception as e:
        _rollback_and_raise(db, "agregar la nota", e)


@router.delete("/{ticket_id}", response_model=Msg, summary="Eliminar un ticket")
def delete_ticket(
    *,
    db: Session = Depends(deps.get_db),
    ticket_id: PyUUID,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    try:
        ticket_service.delete(db, ticket_id=ticket_id, actor=current_user)
        db.commit()
        return {"msg": "Ticket eliminado correctamente."}
    except Exception as e:
        _rollback_and_raise(db, "eliminar el ticket", e)
