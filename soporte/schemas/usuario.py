import uuid
from datetime import datetime
from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from soporte.core.password import validate_password_strength
from .enums import CategoriaTicketEnum, RolUsuarioEnum, TipoUsuarioEnum


# ===============================================================
# Schemas de entrada
# ===============================================================
class UsuarioBase(BaseModel):
    """Campos base que comparte cualquier cuenta."""
    nombre: str = Field(..., min_length=1, max_length=100)
    apellido: Optional[str] = Field(None, max_length=100)
    email: EmailStr = Field(..., description="Correo electrónico (único)")

    @field_validator("nombre")
    @classmethod
    def strip_nombre(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("El nombre es obligatorio.")
        return v


class EstudianteCreate(UsuarioBase):
    """
    Registro de un estudiante. El dominio institucional del email se valida en el
    servicio porque depende de la configuración.
    """
    password: str = Field(..., min_length=8)
    matricula: str = Field(..., min_length=1, max_length=20, description="Matrícula institucional")
    email_personal: Optional[EmailStr] = None
    telefono: Optional[str] = Field(None, max_length=30)
    carrera: Optional[str] = Field(None, max_length=150)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class PersonalCreate(UsuarioBase):
    """Creación de una cuenta de personal por un administrador."""
    password: str = Field(..., min_length=8)
    rol: RolUsuarioEnum
    cedula: Optional[str] = Field(None, max_length=20)
    edad: Optional[int] = Field(None, ge=16, le=100)
    categorias_asignadas: Set[CategoriaTicketEnum] = Field(default_factory=set)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class PerfilUpdate(BaseModel):
    """
    Edición del perfil propio. El rol y el email no son editables por esta vía.
    """
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    apellido: Optional[str] = Field(None, max_length=100)
    telefono: Optional[str] = Field(None, max_length=30)
    email_personal: Optional[EmailStr] = None
    carrera: Optional[str] = Field(None, max_length=150)


class CategoriasUpdate(BaseModel):
    """Reemplaza completo el conjunto de categorías de un miembro del personal."""
    categorias: Set[CategoriaTicketEnum]


# ===============================================================
# Schemas de respuesta
# ===============================================================
class Usuario(BaseModel):
    id: uuid.UUID
    tipo: TipoUsuarioEnum
    nombre: str
    apellido: Optional[str] = None
    email: EmailStr
    rol: RolUsuarioEnum
    created_at: datetime
    updated_at: datetime

    # Estudiante
    matricula: Optional[str] = None
    email_personal: Optional[str] = None
    telefono: Optional[str] = None
    carrera: Optional[str] = None

    # Personal
    cedula: Optional[str] = None
    edad: Optional[int] = None
    categorias_asignadas: List[CategoriaTicketEnum] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("categorias_asignadas", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return sorted(v) if v else []


class UsuarioSimple(BaseModel):
    """Schema simplificado para listados."""
    id: uuid.UUID
    nombre: str
    apellido: Optional[str] = None
    email: EmailStr
    rol: RolUsuarioEnum

    model_config = ConfigDict(from_attributes=True)
