import re
import logging

import bcrypt

from soporte.core.config import settings

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 8
# bcrypt solo admite hasta 72 bytes
PASSWORD_MAX_BYTES = 72
# Al menos una letra y un dígito
PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).+$")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verifica si una contraseña plana coincide con una contraseña hasheada usando bcrypt.

    Args:
        plain_password: La contraseña en texto plano.
        hashed_password: La contraseña hasheada almacenada (como string).

    Returns:
        True si las contraseñas coinciden, False en caso contrario (incluido un hash corrupto).
    """
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError as e:
        # bcrypt.checkpw lanza ValueError si el hash almacenado no es válido
        logger.error(f"Error verificando password (posiblemente hash inválido): {e}")
        return False


def get_password_hash(password: str) -> str:
    """
    Genera el hash de una contraseña usando bcrypt con el costo configurado en BCRYPT_ROUNDS.
    """
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def validate_password_strength(password: str) -> str:
    """Usado por los esquemas de registro y cambio de contraseña."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"La contraseña debe tener al menos {PASSWORD_MIN_LENGTH} caracteres.")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"La contraseña no puede superar los {PASSWORD_MAX_BYTES} bytes.")
    if not PASSWORD_PATTERN.match(password):
        raise ValueError("La contraseña debe contener al menos una letra y un número.")
    return password
