import pytest
from sqlalchemy.orm import Session

from soporte.core.exceptions import PermissionDeniedError, ValidationError
from soporte.core.password import verify_password
from soporte.models.usuario import Estudiante, Personal
from soporte.schemas.enums import CategoriaTicketEnum, RolUsuarioEnum
from soporte.schemas.password import PasswordChange
from soporte.schemas.usuario import EstudianteCreate, PerfilUpdate, PersonalCreate
from soporte.services.usuario import usuario_service

from conftest import TEST_STAFF_PASSWORD, TEST_STUDENT_PASSWORD


def _registro(email: str) -> EstudianteCreate:
    return EstudianteCreate(
        nombre="Luis", apellido="Marte", email=email, password="ClaveSegura123", matricula="2024-0456",
    )


def test_register_normalizes_email_and_assigns_student_role(db: Session):
    estudiante = usuario_service.register(db, obj_in=_registro("Luis.Marte@ITLA.edu.do"))
    db.commit()

    assert isinstance(estudiante, Estudiante)
    assert estudiante.email == "luis.marte@itla.edu.do"
    assert estudiante.rol == RolUsuarioEnum.STUDENT
    assert verify_password("ClaveSegura123", estudiante.hashed_password)


def test_register_rejects_foreign_domain(db: Session):
    with pytest.raises(ValidationError):
        usuario_service.register(db, obj_in=_registro("luis.marte@gmail.com"))


def test_register_rejects_duplicate_ignoring_case(db: Session, test_estudiante: Estudiante):
    with pytest.raises(ValidationError):
        usuario_service.register(db, obj_in=_registro("JUAN.PEREZ@itla.edu.do"))


def test_authenticate_same_result_for_unknown_and_wrong_password(db: Session, test_estudiante: Estudiante):
    assert usuario_service.authenticate(db, email="juan.perez@itla.edu.do", password="otra-clave1") is None
    assert usuario_service.authenticate(db, email="nadie@itla.edu.do", password=TEST_STUDENT_PASSWORD) is None
    assert usuario_service.authenticate(db, email="juan.perez@itla.edu.do", password=TEST_STUDENT_PASSWORD) == test_estudiante


def test_create_staff_within_policy(db: Session, test_globalizador: Personal):
    nuevo = usuario_service.create_staff(
        db,
        obj_in=PersonalCreate(
            nombre="Pedro", email="pedro.dte@itla.edu.do", password="ClaveSegura123",
            rol=RolUsuarioEnum.DTE, categorias_asignadas={CategoriaTicketEnum.VIRTUAL_PASS},
        ),
        creator=test_globalizador,
    )
    db.commit()

    assert nuevo.rol == RolUsuarioEnum.DTE
    assert nuevo.categorias == frozenset({CategoriaTicketEnum.VIRTUAL_PASS})


@pytest.mark.parametrize("rol", [RolUsuarioEnum.SUPREMO_DIGITAL, RolUsuarioEnum.STUDENT])
def test_create_staff_outside_policy(db: Session, test_globalizador: Personal, rol: RolUsuarioEnum):
    with pytest.raises(PermissionDeniedError):
        usuario_service.create_staff(
            db,
            obj_in=PersonalCreate(nombre="X", email="x@itla.edu.do", password="ClaveSegura123", rol=rol),
            creator=test_globalizador,
        )


def test_department_staff_cannot_create_accounts(db: Session, test_ciberseguridad: Personal):
    with pytest.raises(PermissionDeniedError):
        usuario_service.create_staff(
            db,
            obj_in=PersonalCreate(
                nombre="X", email="x@itla.edu.do", password="ClaveSegura123", rol=RolUsuarioEnum.PASANTES
            ),
            creator=test_ciberseguridad,
        )


def test_update_profile_ignores_fields_outside_account_type(db: Session, test_ciberseguridad: Personal):
    usuario_service.update_profile(
        db, db_obj=test_ciberseguridad, obj_in=PerfilUpdate(nombre="Rosa María", telefono="809-000-0000")
    )
    db.commit()

    assert test_ciberseguridad.nombre == "Rosa María"
    assert getattr(test_ciberseguridad, "telefono", None) is None


def test_update_profile_student_fields(db: Session, test_estudiante: Estudiante):
    usuario_service.update_profile(db, db_obj=test_estudiante, obj_in={"carrera": "Redes", "matricula": "9999"})
    db.commit()

    assert test_estudiante.carrera == "Redes"
    assert test_estudiante.matricula == "2023-0123"


def test_change_password(db: Session, test_ciberseguridad: Personal):
    usuario_service.change_password(
        db, user=test_ciberseguridad,
        password_data=PasswordChange(current_password=TEST_STAFF_PASSWORD, new_password="NuevaClave456"),
    )
    db.commit()
    assert verify_password("NuevaClave456", test_ciberseguridad.hashed_password)


def test_change_password_wrong_current(db: Session, test_ciberseguridad: Personal):
    with pytest.raises(ValidationError):
        usuario_service.change_password(
            db, user=test_ciberseguridad,
            password_data=PasswordChange(current_password="incorrecta1", new_password="NuevaClave456"),
        )


def test_get_multi_by_kind(db: Session, test_supremo: Personal, test_estudiante: Estudiante):
    assert usuario_service.get_multi_by_kind(db, personal=True) == [test_supremo]
    assert usuario_service.get_multi_by_kind(db, personal=False) == [test_estudiante]
    assert len(usuario_service.get_multi_by_kind(db)) == 2
