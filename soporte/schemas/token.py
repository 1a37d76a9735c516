import uuid
from typing import Optional

from pydantic import BaseModel

from soporte.schemas.enums import RolUsuarioEnum

# Schema para la respuesta del endpoint de login
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: RolUsuarioEnum

# Schema para los datos contenidos dentro del JWT (payload)
class TokenPayload(BaseModel):
    sub: uuid.UUID | str
    role: Optional[str] = None
