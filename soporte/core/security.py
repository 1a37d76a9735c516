from datetime import datetime, timedelta, timezone
from typing import Any, Union, Optional

from jose import jwt, JWTError
from pydantic import ValidationError
import logging

from soporte.core.config import settings
from soporte.schemas.token import TokenPayload

logger = logging.getLogger(__name__)

ALGORITHM = settings.ALGORITHM

def create_access_token(
    subject: Union[str, Any], role: Optional[str] = None, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Crea un nuevo token de acceso JWT. El rol viaja en el token solo como dato
    informativo para el cliente; las decisiones de autorización se toman siempre
    con el rol cargado de la base de datos.
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"exp": expire, "sub": str(subject)}
    if role:
        to_encode["role"] = role
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)

def decode_access_token(token: str) -> Optional[TokenPayload]:
    """
    Decodifica un token de acceso, valida su estructura y expiración.
    """
    try:
        payload_dict = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[ALGORITHM]
        )
        return TokenPayload(**payload_dict)
    except (JWTError, ValidationError, KeyError) as e:
        logger.error(f"Error decodificando token de acceso: {e}")
        return None
