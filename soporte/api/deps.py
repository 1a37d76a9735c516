from typing import Generator
import logging
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from soporte.core import roles
from soporte.core import security
from soporte.core.config import settings
from soporte.db.session import SessionLocal
from soporte.models.usuario import Usuario

logger = logging.getLogger(__name__)


# --- Dependencia para la Sesión de Base de Datos ---
def get_db() -> Generator[Session, None, None]:
    """Dependency para obtener la sesión de base de datos."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# --- Dependencia para Autenticación ---
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login/access-token"
)

def get_current_user(
    db: Session = Depends(get_db), token: str = Depends(reusable_oauth2)
) -> Usuario:
    """
    Obtiene el usuario actual a partir del token JWT. El rol se lee siempre de la
    base de datos, nunca del token.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudieron validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token_data = security.decode_access_token(token)
    if not token_data or not token_data.sub:
        logger.warning("Token JWT inválido o sin 'sub'.")
        raise credentials_exception

    try:
        user_id = uuid.UUID(str(token_data.sub))
    except ValueError:
        logger.warning(f"Token con 'sub' no válido: {token_data.sub}")
        raise credentials_exception

    user = db.get(Usuario, user_id)
    if not user:
        # La cuenta pudo ser eliminada después de emitir el token
        logger.warning(f"Usuario no encontrado para ID {token_data.sub} en token válido.")
        raise credentials_exception

    logger.debug(f"get_current_user: '{user.email}' (ID: {user.id}, rol {user.rol.value}).")
    return user


def require_user_manager(current_user: Usuario = Depends(get_current_user)) -> Usuario:
    """Dependencia que exige la capacidad de administrar usuarios."""
    if not roles.can_manage_users(current_user.rol):
        logger.warning(f"Acceso denegado: '{current_user.email}' ({current_user.rol.value}) no administra usuarios.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No tiene permiso para administrar usuarios.",
        )
    return current_user


def require_staff(current_user: Usuario = Depends(get_current_user)) -> Usuario:
    """Dependencia que exige una cuenta de personal (cualquier rol excepto estudiante)."""
    if not roles.is_staff(current_user.rol):
        logger.warning(f"Acceso denegado: '{current_user.email}' no es personal de soporte.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Se requiere una cuenta de personal.",
        )
    return current_user
