from typing import TypeVar

from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import Enum as SAEnum, MetaData

convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Sin esquema dedicado: las mismas tablas sirven en PostgreSQL y en SQLite (pruebas)
metadata = MetaData(naming_convention=convention)

class Base(DeclarativeBase):
    """
    Clase base para todos los modelos ORM de SQLAlchemy.
    """
    metadata = metadata

ModelType = TypeVar("ModelType", bound=Base)


def enum_column(enum_cls: type, length: int = 30) -> SAEnum:
    """
    Columna VARCHAR (no ENUM nativo) que guarda el `.value` del enum y devuelve el miembro al leer.
    """
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
