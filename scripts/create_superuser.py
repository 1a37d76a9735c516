import sys
from os.path import abspath, dirname

root_dir = dirname(dirname(abspath(__file__)))
sys.path.append(root_dir)

from sqlalchemy.orm import Session
from soporte.db.session import SessionLocal
from soporte.services.usuario import usuario_service
from soporte.models.usuario import Personal
from soporte.schemas.enums import CategoriaTicketEnum, RolUsuarioEnum
from soporte.core.config import settings
from soporte.core.password import get_password_hash, validate_password_strength


def create_superuser():
    """
    Script síncrono para crear la primera cuenta 'Supremo Digital' a partir de variables de entorno.
    Ninguna cuenta puede crear a la primera, por eso se inserta directamente.
    """
    db: Session = SessionLocal()

    print("--- Iniciando script para crear superusuario ---")

    try:
        # 1. Leer credenciales desde variables de entorno
        admin_email = settings.SUPERUSER_EMAIL
        admin_password = settings.SUPERUSER_PASSWORD

        if not all([admin_email, admin_password]):
            print("!!! ERROR: Define SUPERUSER_EMAIL y SUPERUSER_PASSWORD en tu archivo .env. Saliendo. !!!")
            return
        try:
            validate_password_strength(admin_password)
        except ValueError as e:
            print(f"!!! ERROR: SUPERUSER_PASSWORD no es válida: {e} !!!")
            return

        # 2. Verificar si el superusuario ya existe
        superuser = usuario_service.get_by_email(db, email=admin_email)

        if not superuser:
            print(f"Creando superusuario con email: {admin_email}")
            superuser = Personal(
                nombre="Supremo",
                apellido="Digital",
                email=admin_email.strip().lower(),
                rol=RolUsuarioEnum.SUPREMO_DIGITAL,
                hashed_password=get_password_hash(admin_password),
                categorias_asignadas=sorted(c.value for c in CategoriaTicketEnum),
            )
            db.add(superuser)
            db.commit()
            print("¡Superusuario creado exitosamente!")
        else:
            print(f"El superusuario con email '{admin_email}' ya existe (rol: {superuser.rol.value}).")

    except Exception as e:
        print(f"Ocurrió un error: {e}")
        db.rollback()
    finally:
        print("--- Script finalizado ---")
        db.close()

if __name__ == "__main__":
    create_superuser()
