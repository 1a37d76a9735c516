from pydantic import BaseModel, Field, field_validator

from soporte.core.password import validate_password_strength


class PasswordChange(BaseModel):
    """
    Schema para el cambio de contraseña de un usuario autenticado.
    """
    current_password: str = Field(..., description="La contraseña actual del usuario.")
    new_password: str = Field(..., min_length=8, description="La nueva contraseña para el usuario.")

    @field_validator("new_password")
    @classmethod
    def check_strength(cls, v: str) -> str:
        return validate_password_strength(v)
