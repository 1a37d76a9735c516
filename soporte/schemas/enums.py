from enum import Enum

class RolUsuarioEnum(str, Enum):
    """Roles del sistema. Las capacidades de cada uno viven en `soporte.core.roles`."""
    STUDENT = "STUDENT"
    SUPREMO_DIGITAL = "SUPREMO_DIGITAL"
    GLOBALIZADOR = "GLOBALIZADOR"
    OPERACIONES_TICS = "OPERACIONES_TICS"
    TECNOLOGIA_IT = "TECNOLOGIA_IT"
    DTE = "DTE"
    CIBERSEGURIDAD = "CIBERSEGURIDAD"
    PASANTES = "PASANTES"

class CategoriaTicketEnum(str, Enum):
    """Categorías cerradas de un ticket. También determinan la visibilidad del personal."""
    SIGEI_PASS = "SIGEI_PASS"
    VIRTUAL_PASS = "VIRTUAL_PASS"
    EMAIL_PASS = "EMAIL_PASS"
    ACADEMIC_REQUEST = "ACADEMIC_REQUEST"
    REDES = "REDES"
    EQUIPOS = "EQUIPOS"
    SOFTWARE = "SOFTWARE"
    OTHER = "OTHER"

class EstadoTicketEnum(str, Enum):
    """Valores que coinciden con la columna `estado` de la tabla `tickets`."""
    ABIERTO = "Abierto"
    EN_PROCESO = "En Proceso"
    RESUELTO = "Resuelto"
    CERRADO = "Cerrado"

class PrioridadTicketEnum(str, Enum):
    BAJA = "Baja"
    MEDIA = "Media"
    ALTA = "Alta"

class TipoUsuarioEnum(str, Enum):
    """Discriminador de la tabla `usuarios` (herencia de tabla única)."""
    ESTUDIANTE = "estudiante"
    PERSONAL = "personal"

class TipoNotificacionEnum(str, Enum):
    """Valores que coinciden con la columna `tipo` de la tabla `notificaciones`."""
    INFO = "info"
    ASIGNADO = "asignado"
    ESTADO = "estado"
    TRANSFERIDO = "transferido"
    RESUELTO = "resuelto"
    CERRADO = "cerrado"
    NOTA = "nota"

# Texto de presentación de cada categoría (solo para mensajes y reportes)
ETIQUETAS_CATEGORIA = {
    CategoriaTicketEnum.SIGEI_PASS: "Contraseña SIGEI",
    CategoriaTicketEnum.VIRTUAL_PASS: "Plataforma Virtual",
    CategoriaTicketEnum.EMAIL_PASS: "Correo Institucional",
    CategoriaTicketEnum.ACADEMIC_REQUEST: "Solicitud Académica",
    CategoriaTicketEnum.REDES: "Redes y Conectividad",
    CategoriaTicketEnum.EQUIPOS: "Equipos y Hardware",
    CategoriaTicketEnum.SOFTWARE: "Software y Aplicaciones",
    CategoriaTicketEnum.OTHER: "Otros",
}
