import logging
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy.orm import Session

from soporte.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)

class BaseService(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        """
        Servicio base con operaciones CRUD por defecto.
        Los métodos CUD (Create, Update, Delete) NO realizan commit.
        El commit debe ser manejado en la capa de la ruta (endpoint).

        **Parámetros**

        * `model`: Clase del modelo SQLAlchemy
        """
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        """Obtiene un registro por ID."""
        return db.get(self.model, id)

    def create(self, db: Session, *, obj_in: CreateSchemaType) -> ModelType:
        """
        Crea un nuevo registro.
        NO realiza db.commit(). El commit debe ser manejado por el llamador.
        """
        obj_in_data = obj_in.model_dump()
        db_obj = self.model(**obj_in_data)
        db.add(db_obj)
        logger.info(f"Nuevo registro preparado para creación en {self.model.__name__}")
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """
        Actualiza un objeto existente en la base de datos.
        NO realiza db.commit(). El commit debe ser manejado por el llamador.
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            # exclude_unset para no sobrescribir campos no enviados con None
            update_data = obj_in.model_dump(exclude_unset=True)

        obj_id = getattr(db_obj, 'id', 'N/A')
        logger.debug(f"Actualizando {self.model.__name__} ID {obj_id} con campos: {list(update_data)}")

        if not update_data:
            logger.info(f"No se proporcionaron datos para actualizar en {self.model.__name__} (ID: {obj_id})")
            return db_obj

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
            else:
                logger.warning(f"Intento de actualizar campo '{field}' inexistente en modelo {self.model.__name__}")
        db.add(db_obj)
        logger.info(f"Registro preparado para actualización en {self.model.__name__} (ID: {obj_id})")
        return db_obj
