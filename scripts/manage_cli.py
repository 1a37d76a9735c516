import sys
import argparse
from os.path import abspath, dirname
from getpass import getpass

root_dir = dirname(dirname(abspath(__file__)))
sys.path.append(root_dir)

from soporte.db.session import SessionLocal
from soporte.core import roles
from soporte.core.config import settings
from soporte.core.exceptions import SoporteError
from soporte.core.password import get_password_hash, validate_password_strength
from soporte.models.usuario import Personal
from soporte.services import usuario_service, ticket_service
from soporte.schemas.enums import CategoriaTicketEnum, EstadoTicketEnum, PrioridadTicketEnum, RolUsuarioEnum
from soporte.schemas.usuario import EstudianteCreate, PersonalCreate
from soporte.schemas.ticket import TicketCreate

ROLES_PERMITIDOS = sorted(rol.value for rol in roles.ROLES_PERSONAL)
CATEGORIAS = sorted(c.value for c in CategoriaTicketEnum)

# Cuentas de demostración: (nombre, apellido, email, rol, cédula, edad, categorías)
PERSONAL_DEMO = [
    ("María", "Global", "globalizador", RolUsuarioEnum.GLOBALIZADOR, "001-0000002-2", 40, list(CategoriaTicketEnum)),
    ("Pedro", "Operaciones", "operaciones", RolUsuarioEnum.OPERACIONES_TICS, "001-0000003-3", 35,
     [CategoriaTicketEnum.REDES, CategoriaTicketEnum.EQUIPOS]),
    ("Ana", "Tecnología", "tecnologia", RolUsuarioEnum.TECNOLOGIA_IT, "001-0000004-4", 32,
     [CategoriaTicketEnum.SIGEI_PASS, CategoriaTicketEnum.SOFTWARE]),
    ("Luis", "DTE", "dte", RolUsuarioEnum.DTE, "001-0000005-5", 30,
     [CategoriaTicketEnum.VIRTUAL_PASS, CategoriaTicketEnum.ACADEMIC_REQUEST]),
    ("Rosa", "Cyber", "ciberseguridad", RolUsuarioEnum.CIBERSEGURIDAD, "001-0000006-6", 28,
     [CategoriaTicketEnum.EMAIL_PASS]),
    ("Miguel", "Pasante", "pasante", RolUsuarioEnum.PASANTES, "001-0000007-7", 22, [CategoriaTicketEnum.OTHER]),
]


def _email(local: str) -> str:
    return f"{local}@{settings.INSTITUTIONAL_EMAIL_DOMAIN}"

# --- Funciones de Gestión (Crear/Eliminar) ---

def create_staff(db, nombre: str, apellido: str, email: str, rol: str, categorias: list):
    """
    Crea una cuenta de personal desde la consola. El operador de la consola actúa
    con los permisos de la primera cuenta Supremo Digital.
    """
    print(f"Iniciando creación de cuenta de personal para el email: {email}")
    creador = db.query(Personal).filter(Personal.rol == RolUsuarioEnum.SUPREMO_DIGITAL).first()
    if not creador:
        print("❌ Error: No existe ninguna cuenta Supremo Digital. Ejecute primero scripts/create_superuser.py.")
        return
    password = getpass("Introduce la contraseña para la nueva cuenta: ")
    try:
        user_in = PersonalCreate(
            nombre=nombre,
            apellido=apellido,
            email=email,
            password=password,
            rol=RolUsuarioEnum(rol),
            categorias_asignadas=set(categorias or []),
        )
        usuario_service.create_staff(db, obj_in=user_in, creator=creador)
        db.commit()
        print(f"✅ ¡Cuenta '{email}' con rol '{rol}' creada exitosamente!")
    except (SoporteError, ValueError) as e:
        db.rollback()
        print(f"❌ Error: {e}")
    except Exception as e:
        db.rollback()
        print(f"❌ Error inesperado al crear la cuenta: {e}")

def delete_user(db, email: str):
    """Elimina un usuario de la base de datos por su email."""
    print(f"Intentando eliminar al usuario con email: {email}")
    try:
        user = usuario_service.get_by_email(db, email=email)
        if user:
            db.delete(user)
            db.commit()
            print(f"✅ Usuario con email '{email}' eliminado exitosamente.")
        else:
            print(f"⚠️ No se encontró ningún usuario con el email '{email}'.")
    except Exception as e:
        print(f"❌ Error al eliminar usuario: {e}")
        db.rollback()

def list_users_with_roles(db):
    """Muestra una lista de todos los usuarios junto con sus roles y categorías."""
    print("\n--- LISTA DE USUARIOS Y ROLES ---")
    all_users = usuario_service.get_multi_by_kind(db, skip=0, limit=1000)
    if not all_users:
        print("-> No se encontraron usuarios en la base de datos.")
        return
    print(f"{'ROL':<18} | {'NOMBRE':<25} | {'EMAIL':<32} | {'CATEGORÍAS'}")
    print("-" * 100)
    for user in all_users:
        categorias = ", ".join(sorted(c.value for c in user.categorias)) or "-"
        print(f"{user.rol.value:<18} | {user.nombre_completo:<25} | {user.email:<32} | {categorias}")
    print("-" * 100)
    print(f"Total: {len(all_users)} usuarios.")

def list_roles_only():
    """Muestra la tabla de roles y capacidades del sistema."""
    print("\n--- TABLA DE ROLES DEL SISTEMA ---")
    print(f"{'ROL':<18} | {'NIVEL':<5} | {'USUARIOS':<8} | {'CATEGORÍAS':<10} | {'VER TODO':<8} | {'ELIMINAR'}")
    print("-" * 80)
    for rol, cap in sorted(roles.ROLE_CONFIG.items(), key=lambda item: -item[1].level):
        print(
            f"{rol.value:<18} | {cap.level:<5} | {'sí' if cap.can_manage_users else 'no':<8} | "
            f"{'sí' if cap.can_assign_categories else 'no':<10} | {'sí' if cap.can_view_all_tickets else 'no':<8} | "
            f"{'sí' if cap.can_delete_tickets else 'no'}"
        )
    print("-" * 80)

def seed_demo(db):
    """
    Carga cuentas y tickets de demostración usando los servicios del sistema.
    Todas las cuentas usan DEMO_PASSWORD.
    """
    print("--- Cargando datos de demostración ---")
    password = settings.DEMO_PASSWORD
    validate_password_strength(password)
    try:
        supremo = usuario_service.get_by_email(db, email=_email("supremo"))
        if not supremo:
            supremo = Personal(
                nombre="Carlos", apellido="Supremo", email=_email("supremo"),
                rol=RolUsuarioEnum.SUPREMO_DIGITAL, hashed_password=get_password_hash(password),
                cedula="001-0000001-1", edad=45, categorias_asignadas=CATEGORIAS,
            )
            db.add(supremo)
            db.flush()
            print(f"✔️ {supremo.email}")

        personal = {}
        for nombre, apellido, local, rol, cedula, edad, categorias in PERSONAL_DEMO:
            existente = usuario_service.get_by_email(db, email=_email(local))
            if existente:
                personal[local] = existente
                continue
            personal[local] = usuario_service.create_staff(
                db,
                obj_in=PersonalCreate(
                    nombre=nombre, apellido=apellido, email=_email(local), password=password,
                    rol=rol, cedula=cedula, edad=edad, categorias_asignadas=set(categorias),
                ),
                creator=supremo,
            )
            db.flush()
            print(f"✔️ {_email(local)} ({rol.value})")

        estudiante = usuario_service.get_by_email(db, email=_email("juan.perez"))
        if estudiante:
            db.commit()
            print("⚠️ El estudiante de demostración ya existe; no se crean tickets.")
            return
        estudiante = usuario_service.register(
            db,
            obj_in=EstudianteCreate(
                nombre="Juan", apellido="Pérez", email=_email("juan.perez"), password=password,
                matricula="2023-0123", email_personal="juan.perez@gmail.com",
                telefono="809-555-1234", carrera="Desarrollo de Software",
            ),
        )
        db.flush()
        print(f"✔️ {estudiante.email} (STUDENT)")

        correo = ticket_service.create(
            db,
            obj_in=TicketCreate(
                titulo="No puedo acceder a mi correo institucional",
                descripcion=(
                    "Desde hace 2 días no puedo entrar a mi correo. Dice que la contraseña es incorrecta. "
                    "Necesito acceder urgente porque tengo entregas pendientes."
                ),
                categoria=CategoriaTicketEnum.EMAIL_PASS,
                tipo_problema="Acceso denegado",
            ),
            requester=estudiante,
        )
        ticket_service.assign(db, ticket_id=correo.id, actor=personal["ciberseguridad"])
        ticket_service.add_note(
            db, ticket_id=correo.id, actor=personal["ciberseguridad"],
            texto="Solicitud recibida. Verificando estado de la cuenta en el directorio.",
        )

        ticket_service.create(
            db,
            obj_in=TicketCreate(
                titulo="Problema con plataforma virtual",
                descripcion="No me aparecen las materias de este cuatrimestre en la plataforma virtual.",
                categoria=CategoriaTicketEnum.VIRTUAL_PASS,
                prioridad=PrioridadTicketEnum.MEDIA,
                tipo_problema="Sincronización de datos",
            ),
            requester=estudiante,
        )

        sigei = ticket_service.create(
            db,
            obj_in=TicketCreate(
                titulo="Solicitud de cambio de contraseña SIGEI",
                descripcion="Olvidé mi contraseña de SIGEI y necesito recuperarla para inscribir mis materias.",
                categoria=CategoriaTicketEnum.SIGEI_PASS,
                prioridad=PrioridadTicketEnum.MEDIA,
                tipo_problema="Recuperación de contraseña",
            ),
            requester=estudiante,
        )
        ticket_service.assign(db, ticket_id=sigei.id, actor=personal["tecnologia"])
        ticket_service.add_note(
            db, ticket_id=sigei.id, actor=personal["tecnologia"],
            texto="Se ha restablecido la contraseña. Se enviaron las instrucciones al correo personal.",
        )
        ticket_service.set_status(
            db, ticket_id=sigei.id, new_status=EstadoTicketEnum.RESUELTO, actor=personal["tecnologia"]
        )

        db.commit()
        print("✅ Datos de demostración cargados (3 tickets).")
    except (SoporteError, ValueError) as e:
        db.rollback()
        print(f"❌ Error: {e}")
    except Exception as e:
        db.rollback()
        print(f"❌ Error inesperado al cargar los datos de demostración: {e}")

# --- Interfaz de Línea de Comandos Principal ---

def main():
    parser = argparse.ArgumentParser(description="Herramienta CLI para gestionar el sistema de soporte.")
    subparsers = parser.add_subparsers(dest="command", help="Comandos disponibles", required=True)

    # Comando para crear una cuenta de personal
    parser_create = subparsers.add_parser("create-staff", help="Crear una cuenta de personal.")
    parser_create.add_argument("--nombre", type=str, required=True, help="Nombre.")
    parser_create.add_argument("--apellido", type=str, default=None, help="Apellido.")
    parser_create.add_argument("--email", type=str, required=True, help="Email institucional.")
    parser_create.add_argument("--rol", type=str, required=True, choices=ROLES_PERMITIDOS, help="Rol de la cuenta.")
    parser_create.add_argument("--categorias", nargs="*", choices=CATEGORIAS, default=[], help="Categorías asignadas.")

    # Comando para eliminar un usuario
    parser_delete = subparsers.add_parser("delete", help="Eliminar un usuario existente.")
    parser_delete.add_argument("--email", type=str, required=True, help="Email del usuario a eliminar.")

    subparsers.add_parser("list-users", help="Mostrar una lista de todos los usuarios y sus roles.")
    subparsers.add_parser("list-roles", help="Mostrar la tabla de roles y capacidades.")
    subparsers.add_parser("seed-demo", help="Cargar cuentas y tickets de demostración.")

    args = parser.parse_args()
    if args.command == "list-roles":
        list_roles_only()
        return

    db = SessionLocal()
    try:
        if args.command == "create-staff":
            create_staff(db, nombre=args.nombre, apellido=args.apellido, email=args.email,
                         rol=args.rol, categorias=args.categorias)
        elif args.command == "delete":
            delete_user(db, email=args.email)
        elif args.command == "list-users":
            list_users_with_roles(db)
        elif args.command == "seed-demo":
            seed_demo(db)
    finally:
        db.close()

if __name__ == "__main__":
    main()
