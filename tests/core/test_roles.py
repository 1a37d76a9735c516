import pytest

from soporte.core import roles
from soporte.schemas.enums import RolUsuarioEnum

SUPER_ROLES = [RolUsuarioEnum.SUPREMO_DIGITAL, RolUsuarioEnum.GLOBALIZADOR]
DEPARTMENT_ROLES = [
    RolUsuarioEnum.OPERACIONES_TICS,
    RolUsuarioEnum.TECNOLOGIA_IT,
    RolUsuarioEnum.DTE,
    RolUsuarioEnum.CIBERSEGURIDAD,
    RolUsuarioEnum.PASANTES,
]


def test_every_role_has_capabilities():
    assert set(roles.ROLE_CONFIG) == set(RolUsuarioEnum)


@pytest.mark.parametrize("rol", SUPER_ROLES)
def test_super_roles_have_every_capability(rol):
    assert roles.can_manage_users(rol)
    assert roles.can_assign_categories(rol)
    assert roles.can_view_all_tickets(rol)
    assert roles.can_delete_tickets(rol)
    assert roles.is_staff(rol)


@pytest.mark.parametrize("rol", DEPARTMENT_ROLES + [RolUsuarioEnum.STUDENT])
def test_non_super_roles_have_no_capability(rol):
    assert not roles.can_manage_users(rol)
    assert not roles.can_assign_categories(rol)
    assert not roles.can_view_all_tickets(rol)
    assert not roles.can_delete_tickets(rol)


def test_levels_order():
    assert roles.level_of(RolUsuarioEnum.SUPREMO_DIGITAL) > roles.level_of(RolUsuarioEnum.GLOBALIZADOR)
    assert roles.level_of(RolUsuarioEnum.GLOBALIZADOR) > roles.level_of(RolUsuarioEnum.DTE)
    assert roles.level_of(RolUsuarioEnum.DTE) > roles.level_of(RolUsuarioEnum.PASANTES)
    assert roles.level_of(RolUsuarioEnum.PASANTES) > roles.level_of(RolUsuarioEnum.STUDENT)


def test_student_is_not_staff():
    assert not roles.is_staff(RolUsuarioEnum.STUDENT)
    assert all(roles.is_staff(r) for r in DEPARTMENT_ROLES)


def test_accepts_raw_values():
    assert roles.can_view_all_tickets("GLOBALIZADOR")
    assert roles.capabilities_of("DTE").label == "DTE"


def test_unknown_role_raises():
    with pytest.raises(ValueError):
        roles.capabilities_of("ADMIN")


def test_creatable_roles_policy():
    assert roles.creatable_roles(RolUsuarioEnum.SUPREMO_DIGITAL) == roles.ROLES_PERSONAL
    assert RolUsuarioEnum.SUPREMO_DIGITAL not in roles.creatable_roles(RolUsuarioEnum.GLOBALIZADOR)
    assert RolUsuarioEnum.PASANTES in roles.creatable_roles(RolUsuarioEnum.GLOBALIZADOR)
    assert roles.creatable_roles(RolUsuarioEnum.DTE) == frozenset()
    assert roles.creatable_roles(RolUsuarioEnum.STUDENT) == frozenset()
    assert RolUsuarioEnum.STUDENT not in roles.creatable_roles(RolUsuarioEnum.SUPREMO_DIGITAL)


def test_can_delete_account_by_level():
    assert roles.can_delete_account(RolUsuarioEnum.SUPREMO_DIGITAL, RolUsuarioEnum.GLOBALIZADOR)
    assert roles.can_delete_account(RolUsuarioEnum.GLOBALIZADOR, RolUsuarioEnum.CIBERSEGURIDAD)
    assert roles.can_delete_account(RolUsuarioEnum.GLOBALIZADOR, RolUsuarioEnum.GLOBALIZADOR)
    assert not roles.can_delete_account(RolUsuarioEnum.GLOBALIZADOR, RolUsuarioEnum.SUPREMO_DIGITAL)
    assert not roles.can_delete_account(RolUsuarioEnum.CIBERSEGURIDAD, RolUsuarioEnum.STUDENT)
