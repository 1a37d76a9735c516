import logging
from typing import Any, Dict, Iterable, List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session
from sqlalchemy import func, select

from soporte.core import roles
from soporte.core.config import settings
from soporte.core.events import TOPIC_USUARIOS, queue_event
from soporte.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from soporte.core.password import verify_password, get_password_hash
from soporte.models.usuario import Estudiante, Personal, Usuario
from soporte.schemas.enums import CategoriaTicketEnum, RolUsuarioEnum
from soporte.schemas.password import PasswordChange
from soporte.schemas.usuario import EstudianteCreate, PersonalCreate, PerfilUpdate

from .base_service import BaseService

logger = logging.getLogger(__name__)

# Campos que cada tipo de cuenta puede editar en su propio perfil
_CAMPOS_PERFIL_COMUNES = {"nombre", "apellido"}
_CAMPOS_PERFIL_ESTUDIANTE = _CAMPOS_PERFIL_COMUNES | {"telefono", "email_personal", "carrera"}


class UsuarioService(BaseService[Usuario, EstudianteCreate, PerfilUpdate]):
    """
    Directorio de usuarios: registro de estudiantes, cuentas de personal,
    asignación de categorías y eliminación de cuentas.
    """

    def get_by_email(self, db: Session, *, email: str) -> Optional[Usuario]:
        """Obtiene un usuario por su correo electrónico (sin distinguir mayúsculas)."""
        statement = select(self.model).where(func.lower(self.model.email) == email.strip().lower())
        return db.execute(statement).scalar_one_or_none()

    def _check_email_disponible(self, db: Session, email: str) -> None:
        if self.get_by_email(db, email=email):
            logger.warning(f"Intento de crear usuario con email duplicado: {email}")
            raise ValidationError("Ya existe una cuenta con ese correo electrónico.")

    def register(self, db: Session, *, obj_in: EstudianteCreate) -> Estudiante:
        """
        Registro público de un estudiante. El correo debe pertenecer al dominio institucional.
        NO realiza db.commit().
        """
        email = obj_in.email.strip().lower()
        dominio = settings.INSTITUTIONAL_EMAIL_DOMAIN.lower()
        if not email.endswith(f"@{dominio}"):
            logger.warning(f"Registro rechazado: email '{email}' fuera del dominio institucional.")
            raise ValidationError(f"Debe usar su correo institucional (@{dominio}).")
        self._check_email_disponible(db, email)

        create_data = obj_in.model_dump(exclude={"password", "email"})
        db_obj = Estudiante(
            **create_data,
            email=email,
            rol=RolUsuarioEnum.STUDENT,
            hashed_password=get_password_hash(obj_in.password),
        )
        db.add(db_obj)
        queue_event(db, TOPIC_USUARIOS, {"accion": "registrado"})
        logger.info(f"Estudiante '{email}' preparado para ser registrado.")
        return db_obj

    def create_staff(self, db: Session, *, obj_in: PersonalCreate, creator: Usuario) -> Personal:
        """
        Crea una cuenta de personal. El rol otorgado debe estar en la política de
        creación del rol del creador. NO realiza db.commit().
        """
        permitidos = roles.creatable_roles(creator.rol)
        if obj_in.rol not in permitidos:
            logger.warning(
                f"Usuario '{creator.email}' ({creator.rol.value}) intentó crear una cuenta con rol {obj_in.rol.value}."
            )
            raise PermissionDeniedError("No tiene permiso para crear cuentas con ese rol.")

        email = obj_in.email.strip().lower()
        self._check_email_disponible(db, email)

        create_data = obj_in.model_dump(exclude={"password", "email", "categorias_asignadas"})
        db_obj = Personal(
            **create_data,
            email=email,
            hashed_password=get_password_hash(obj_in.password),
            categorias_asignadas=sorted(c.value for c in obj_in.categorias_asignadas),
        )
        db.add(db_obj)
        queue_event(db, TOPIC_USUARIOS, {"accion": "creado"})
        logger.info(f"Cuenta de personal '{email}' ({obj_in.rol.value}) preparada para ser creada por '{creator.email}'.")
        return db_obj

    def update_assigned_categories(
        self, db: Session, *, user_id: UUID, categorias: Iterable[CategoriaTicketEnum], actor: Usuario
    ) -> Personal:
        """Reemplaza completo el conjunto de categorías de un miembro del personal."""
        if not roles.can_assign_categories(actor.rol):
            logger.warning(f"Usuario '{actor.email}' sin permiso intentó asignar categorías a {user_id}.")
            raise PermissionDeniedError("No tiene permiso para asignar categorías.")

        target = self.get(db, id=user_id)
        if target is None:
            raise NotFoundError("Usuario no encontrado.")
        if not isinstance(target, Personal):
            raise ValidationError("Solo se pueden asignar categorías a cuentas de personal.")

        nuevas = sorted({CategoriaTicketEnum(c).value for c in categorias})
        target.categorias_asignadas = nuevas
        db.add(target)
        queue_event(db, TOPIC_USUARIOS, {"accion": "categorias", "usuario_id": str(target.id)})
        logger.info(f"Categorías de '{target.email}' reemplazadas por {nuevas} (por '{actor.email}').")
        return target

    def delete(self, db: Session, *, user_id: UUID, actor: Usuario) -> bool:
        """
        Elimina una cuenta. Nadie puede eliminarse a sí mismo, y un administrador
        no puede eliminar una cuenta de nivel superior al suyo. NO realiza db.commit().
        """
        if not roles.can_manage_users(actor.rol):
            logger.warning(f"Usuario '{actor.email}' sin permiso intentó eliminar la cuenta {user_id}.")
            raise PermissionDeniedError("No tiene permiso para eliminar usuarios.")
        if actor.id == user_id:
            logger.warning(f"Usuario '{actor.email}' intentó eliminar su propia cuenta.")
            raise PermissionDeniedError("No puede eliminar su propia cuenta.")

        target = self.get(db, id=user_id)
        if target is None:
            raise NotFoundError("Usuario no encontrado.")
        if not roles.can_delete_account(actor.rol, target.rol):
            logger.warning(f"Usuario '{actor.email}' intentó eliminar una cuenta de nivel superior ('{target.email}').")
            raise PermissionDeniedError("No puede eliminar una cuenta de nivel superior al suyo.")

        db.delete(target)
        queue_event(db, TOPIC_USUARIOS, {"accion": "eliminado", "usuario_id": str(user_id)})
        logger.warning(f"Cuenta '{target.email}' preparada para eliminación por '{actor.email}'.")
        return True

    def authenticate(self, db: Session, *, email: str, password: str) -> Optional[Usuario]:
        """
        Autentica por email y contraseña. Email inexistente y contraseña incorrecta
        producen el mismo resultado (None).
        """
        user = self.get_by_email(db, email=email)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning(f"Intento de login fallido para '{email}'.")
            return None
        logger.info(f"Usuario '{user.email}' autenticado.")
        return user

    def update_profile(
        self, db: Session, *, db_obj: Usuario, obj_in: Union[PerfilUpdate, Dict[str, Any]]
    ) -> Usuario:
        """Edición del perfil propio; los campos que no aplican al tipo de cuenta se ignoran."""
        update_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        permitidos = _CAMPOS_PERFIL_ESTUDIANTE if isinstance(db_obj, Estudiante) else _CAMPOS_PERFIL_COMUNES
        ignorados = set(update_data) - permitidos
        if ignorados:
            logger.debug(f"Campos de perfil ignorados para '{db_obj.email}': {ignorados}")
        update_data = {k: v for k, v in update_data.items() if k in permitidos}
        if "nombre" in update_data and not (update_data["nombre"] or "").strip():
            raise ValidationError("El nombre es obligatorio.")
        updated = super().update(db, db_obj=db_obj, obj_in=update_data)
        queue_event(db, TOPIC_USUARIOS, {"accion": "perfil", "usuario_id": str(db_obj.id)})
        return updated

    def change_password(self, db: Session, *, user: Usuario, password_data: PasswordChange) -> bool:
        if not verify_password(password_data.current_password, user.hashed_password):
            logger.warning(f"Cambio de contraseña rechazado para '{user.email}': contraseña actual incorrecta.")
            raise ValidationError("La contraseña actual es incorrecta.")
        if password_data.current_password == password_data.new_password:
            raise ValidationError("La nueva contraseña debe ser diferente a la actual.")
        user.hashed_password = get_password_hash(password_data.new_password)
        db.add(user)
        logger.info(f"Contraseña actualizada para '{user.email}'.")
        return True

    def get_multi_by_kind(
        self, db: Session, *, personal: Optional[bool] = None, skip: int = 0, limit: int = 100
    ) -> List[Usuario]:
        """Lista usuarios; `personal=True` solo personal, `False` solo estudiantes, `None` todos."""
        model = self.model
        if personal is True:
            model = Personal
        elif personal is False:
            model = Estudiante
        statement = select(model).order_by(model.created_at.desc()).offset(skip).limit(limit)
        return list(db.execute(statement).scalars().all())

usuario_service = UsuarioService(Usuario)
