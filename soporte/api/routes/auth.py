import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, OperationalError

from soporte.api import deps
from soporte.core import security
from soporte.core.exceptions import SoporteError, StoreUnavailableError, ValidationError
from soporte.models.usuario import Usuario as UsuarioModel
from soporte.schemas.common import Msg
from soporte.schemas.password import PasswordChange
from soporte.schemas.token import Token
from soporte.schemas.usuario import EstudianteCreate, Usuario
from soporte.services.usuario import usuario_service

router = APIRouter()
logger = logging.getLogger(__name__)

# --- Rutas de Login ---
@router.post("/login/access-token", response_model=Token)
def login_access_token(
    db: Session = Depends(deps.get_db),
    form_data: OAuth2PasswordRequestForm = Depends()
) -> Any:
    """
    Login con email (campo `username` del formulario OAuth2) y contraseña.
    Un email inexistente y una contraseña incorrecta producen el mismo error.
    """
    logger.info(f"Intento de login para '{form_data.username}'")
    try:
        user = usuario_service.authenticate(db, email=form_data.username, password=form_data.password)
    except OperationalError as e:
        logger.error(f"Base de datos no disponible durante el login: {e}")
        raise StoreUnavailableError() from e

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Correo o contraseña incorrectos.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = security.create_access_token(subject=user.id, role=user.rol.value)
    return {"access_token": access_token, "token_type": "bearer", "role": user.rol}


@router.post(
    "/register",
    response_model=Usuario,
    status_code=status.HTTP_201_CREATED,
    summary="Registro de estudiante",
)
def register_estudiante(
    *,
    db: Session = Depends(deps.get_db),
    user_in: EstudianteCreate,
) -> Any:
    """Crea una cuenta de estudiante. Requiere correo institucional."""
    logger.info(f"Solicitud de registro para '{user_in.email}'")
    try:
        user = usuario_service.register(db, obj_in=user_in)
        db.commit()
        db.refresh(user)
        logger.info(f"Estudiante '{user.email}' (ID: {user.id}) registrado.")
        return user
    except SoporteError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        # Dos registros simultáneos con el mismo email
        logger.warning(f"Registro duplicado detectado por la base de datos para '{user_in.email}': {e}")
        raise ValidationError("Ya existe una cuenta con ese correo electrónico.") from e
    except OperationalError as e:
        db.rollback()
        logger.error(f"Base de datos no disponible durante el registro: {e}")
        raise StoreUnavailableError() from e
    except Exception as e:
        db.rollback()
        logger.error(f"Error inesperado registrando '{user_in.email}': {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error interno del servidor al registrar la cuenta.")


@router.post("/change-password", response_model=Msg)
def change_password(
    *,
    db: Session = Depends(deps.get_db),
    password_data: PasswordChange,
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Any:
    """Cambia la contraseña del usuario autenticado."""
    try:
        usuario_service.change_password(db, user=current_user, password_data=password_data)
        db.commit()
        return {"msg": "Contraseña actualizada correctamente."}
    except SoporteError:
        db.rollback()
        raise
    except OperationalError as e:
        db.rollback()
        raise StoreUnavailableError() from e
    except Exception as e:
        db.rollback()
        logger.error(f"Error inesperado cambiando la contraseña de '{current_user.email}': {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error interno al cambiar la contraseña.")
