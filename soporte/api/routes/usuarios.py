import logging
from typing import Any, List, Optional
from uuid import UUID as PyUUID

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, OperationalError

from soporte.api import deps
from soporte.core import roles
from soporte.core.exceptions import SoporteError, StoreUnavailableError, ValidationError, NotFoundError
from soporte.models import Usuario as UsuarioModel
from soporte.schemas import Usuario, UsuarioSimple, PersonalCreate, PerfilUpdate, CategoriasUpdate, Msg
from soporte.schemas.enums import RolUsuarioEnum
from soporte.services.usuario import usuario_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/me", response_model=Usuario, summary="Obtener perfil del usuario actual")
def read_usuario_me(
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    """Obtiene la información del usuario que realiza la petición (autenticado)."""
    return current_user


@router.put("/me", response_model=Usuario, summary="Actualizar perfil propio")
def update_usuario_me(
    *,
    db: Session = Depends(deps.get_db),
    perfil_in: PerfilUpdate,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    """Actualiza nombre, apellido y datos de contacto. El rol y el email no cambian por esta vía."""
    try:
        user = usuario_service.update_profile(db, db_obj=current_user, obj_in=perfil_in)
        db.commit()
        db.refresh(user)
        logger.info(f"Perfil de '{user.email}' actualizado.")
        return user
    except SoporteError:
        db.rollback()
        raise
    except OperationalError as e:
        db.rollback()
        raise StoreUnavailableError() from e
    except Exception as e:
        db.rollback()
        logger.error(f"Error inesperado actualizando el perfil de '{current_user.email}': {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error interno al actualizar el perfil.")


@router.get("/roles-creables", response_model=List[RolUsuarioEnum], summary="Roles que el usuario actual puede otorgar")
def read_roles_creables(
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    return sorted(roles.creatable_roles(current_user.rol), key=lambda r: -roles.level_of(r))


@router.get("/", response_model=List[UsuarioSimple], summary="Listar usuarios")
def read_usuarios(
    db: Session = Depends(deps.get_db),
    personal: Optional[bool] = Query(None, description="true: solo personal, false: solo estudiantes"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: UsuarioModel = Depends(deps.require_user_manager),
) -> Any:
    logger.info(f"Usuario '{current_user.email}' listando usuarios (personal={personal}).")
    return usuario_service.get_multi_by_kind(db, personal=personal, skip=skip, limit=limit)


@router.get("/{usuario_id}", response_model=Usuario, summary="Obtener un usuario")
def read_usuario_by_id(
    usuario_id: PyUUID,
    db: Session = Depends(deps.get_db),
    current_user: UsuarioModel = Depends(deps.require_user_manager),
) -> Any:
    user = usuario_service.get(db, id=usuario_id)
    if not user:
        raise NotFoundError("Usuario no encontrado.")
    return user


@router.post(
    "/personal",
    response_model=Usuario,
    status_code=status.HTTP_201_CREATED,
    summary="Crear una cuenta de personal",
)
def create_personal(
    *,
    db: Session = Depends(deps.get_db),
    user_in: PersonalCreate,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    """
    Crea una cuenta de personal. El rol a otorgar debe estar permitido para
    el rol de quien crea la cuenta.
    """
    logger.info(f"Intento de creación de cuenta '{user_in.email}' ({user_in.rol.value}) por '{current_user.email}'")
    try:
        user = usuario_service.create_staff(db, obj_in=user_in, creator=current_user)
        db.commit()
        db.refresh(user)
        logger.info(f"Cuenta de personal '{user.email}' (ID: {user.id}) creada por '{current_user.email}'.")
        return user
    except SoporteError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Email duplicado detectado por la base de datos para '{user_in.email}': {e}")
        raise ValidationError("Ya existe una cuenta con ese correo electrónico.") from e
    except OperationalError as e:
        db.rollback()
        raise StoreUnavailableError() from e
    except Exception as e:
        db.rollback()
        logger.error(f"Error inesperado creando la cuenta '{user_in.email}': {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error interno del servidor al crear el usuario.")


@router.put("/{usuario_id}/categorias", response_model=Usuario, summary="Asignar categorías a un miembro del personal")
def update_categorias(
    *,
    db: Session = Depends(deps.get_db),
    usuario_id: PyUUID,
    categorias_in: CategoriasUpdate,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    """Reemplaza completo el conjunto de categorías asignadas."""
    try:
        user = usuario_service.update_assigned_categories(
            db, user_id=usuario_id, categorias=categorias_in.categorias, actor=current_user
        )
        db.commit()
        db.refresh(user)
        return user
    except SoporteError:
        db.rollback()
        raise
    except OperationalError as e:
        db.rollback()
        raise StoreUnavailableError() from e
    except Exception as e:
        db.rollback()
        logger.error(f"Error inesperado asignando categorías a {usuario_id}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error interno al asignar categorías.")


@router.delete("/{usuario_id}", response_model=Msg, summary="Eliminar un usuario")
def delete_usuario(
    *,
    db: Session = Depends(deps.get_db),
    usuario_id: PyUUID,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    try:
        usuario_service.delete(db, user_id=usuario_id, actor=current_user)
        db.commit()
        return {"msg": "Usuario eliminado correctamente."}
    except SoporteError:
        db.rollback()
        raise
    except OperationalError as e:
        db.rollback()
        raise StoreUnavailableError() from e
    except Exception as e:
        db.rollback()
        logger.error(f"Error inesperado eliminando el usuario {usuario_id}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error interno al eliminar el usuario.")
