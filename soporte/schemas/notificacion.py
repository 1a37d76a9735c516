import uuid
from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict

from .enums import TipoNotificacionEnum

# ===============================================================
# Schema Base
# ===============================================================
class NotificacionBase(BaseModel):
    """Campos base que definen una notificación."""
    mensaje: str = Field(..., description="Contenido del mensaje de la notificación")
    tipo: TipoNotificacionEnum = Field(default=TipoNotificacionEnum.INFO, description="Categoría de la notificación")
    referencia_id: Optional[uuid.UUID] = Field(None, description="ID del ticket relacionado")
    referencia_numero: Optional[str] = Field(None, description="Número visible del ticket relacionado")


# ===============================================================
# Schema para Creación Interna
# ===============================================================
class NotificacionCreateInternal(NotificacionBase):
    """
    Schema para crear una notificación desde la lógica de negocio.
    No se expone en ningún endpoint.
    """
    usuario_id: uuid.UUID = Field(..., description="ID del usuario que recibirá la notificación")


class NotificacionUpdate(BaseModel):
    """Marcar una notificación como leída o no leída."""
    leido: bool = Field(..., description="Establecer el estado de 'leído' de la notificación")


# ===============================================================
# Schema para Respuesta API
# ===============================================================
class Notificacion(NotificacionBase):
    id: uuid.UUID
    usuario_id: uuid.UUID
    leido: bool
    created_at: datetime
    fecha_leido: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class NotificacionesNoLeidas(BaseModel):
    count: int = Field(..., ge=0)
