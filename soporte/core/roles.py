# =================================================================
# Tabla de Roles y Capacidades
# =================================================================
# Única fuente de verdad para las decisiones de autorización.
# Ningún otro módulo debe comparar roles directamente.
# =================================================================
from dataclasses import dataclass
from typing import Dict, FrozenSet

from soporte.schemas.enums import RolUsuarioEnum


@dataclass(frozen=True)
class RoleCapabilities:
    label: str
    level: int
    can_manage_users: bool
    can_assign_categories: bool
    can_view_all_tickets: bool
    can_delete_tickets: bool


def _super_rol(label: str, level: int) -> RoleCapabilities:
    return RoleCapabilities(
        label=label,
        level=level,
        can_manage_users=True,
        can_assign_categories=True,
        can_view_all_tickets=True,
        can_delete_tickets=True,
    )


def _rol_sin_capacidades(label: str, level: int) -> RoleCapabilities:
    return RoleCapabilities(
        label=label,
        level=level,
        can_manage_users=False,
        can_assign_categories=False,
        can_view_all_tickets=False,
        can_delete_tickets=False,
    )


ROLE_CONFIG: Dict[RolUsuarioEnum, RoleCapabilities] = {
    # --- Roles "super" (ven y gestionan todo) ---
    RolUsuarioEnum.SUPREMO_DIGITAL: _super_rol("Supremo Digital", 100),
    RolUsuarioEnum.GLOBALIZADOR: _super_rol("Globalizador", 90),
    # --- Roles de departamento (actúan dentro de sus categorías asignadas) ---
    RolUsuarioEnum.OPERACIONES_TICS: _rol_sin_capacidades("Operaciones TICs", 70),
    RolUsuarioEnum.TECNOLOGIA_IT: _rol_sin_capacidades("Tecnología IT", 70),
    RolUsuarioEnum.DTE: _rol_sin_capacidades("DTE", 70),
    RolUsuarioEnum.CIBERSEGURIDAD: _rol_sin_capacidades("CiberSeguridad", 70),
    RolUsuarioEnum.PASANTES: _rol_sin_capacidades("Pasantes", 50),
    # --- Estudiante ---
    RolUsuarioEnum.STUDENT: _rol_sin_capacidades("Estudiante", 0),
}

ROLES_PERSONAL: FrozenSet[RolUsuarioEnum] = frozenset(
    rol for rol in RolUsuarioEnum if rol is not RolUsuarioEnum.STUDENT
)

# Política de creación de cuentas: qué roles puede otorgar cada rol creador.
ROLES_CREABLES: Dict[RolUsuarioEnum, FrozenSet[RolUsuarioEnum]] = {
    RolUsuarioEnum.SUPREMO_DIGITAL: ROLES_PERSONAL,
    RolUsuarioEnum.GLOBALIZADOR: ROLES_PERSONAL - {RolUsuarioEnum.SUPREMO_DIGITAL},
}


def capabilities_of(role: RolUsuarioEnum) -> RoleCapabilities:
    """
    Devuelve las capacidades de un rol.

    Un valor fuera del conjunto cerrado de roles es un error de programación:
    se lanza `ValueError` en lugar de tratarlo como "sin permisos".
    """
    return ROLE_CONFIG[RolUsuarioEnum(role)]


def can_manage_users(role: RolUsuarioEnum) -> bool:
    return capabilities_of(role).can_manage_users


def can_assign_categories(role: RolUsuarioEnum) -> bool:
    return capabilities_of(role).can_assign_categories


def can_view_all_tickets(role: RolUsuarioEnum) -> bool:
    return capabilities_of(role).can_view_all_tickets


def can_delete_tickets(role: RolUsuarioEnum) -> bool:
    return capabilities_of(role).can_delete_tickets


def is_staff(role: RolUsuarioEnum) -> bool:
    return RolUsuarioEnum(role) in ROLES_PERSONAL


def level_of(role: RolUsuarioEnum) -> int:
    return capabilities_of(role).level


def creatable_roles(creator_role: RolUsuarioEnum) -> FrozenSet[RolUsuarioEnum]:
    """Roles que `creator_role` puede otorgar al crear una cuenta de personal."""
    if not can_manage_users(creator_role):
        return frozenset()
    return ROLES_CREABLES.get(RolUsuarioEnum(creator_role), frozenset())


def can_delete_account(actor_role: RolUsuarioEnum, target_role: RolUsuarioEnum) -> bool:
    """
    Un administrador puede eliminar cuentas de nivel igual o inferior al suyo.
    (La regla de no auto-eliminación depende de la identidad y se valida en el servicio.)
    """
    return can_manage_users(actor_role) and level_of(target_role) <= level_of(actor_role)
