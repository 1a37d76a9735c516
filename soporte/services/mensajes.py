from typing import Optional

from soporte.schemas.enums import TipoNotificacionEnum

# Acciones que generan una nota de sistema en el historial del ticket
ACCION_ASIGNADO = "assigned"
ACCION_CAMBIO_ESTADO = "statusChange"
ACCION_TRANSFERIDO = "transferred"
ACCION_RESUELTO = "resolved"
ACCION_CERRADO = "closed"

_NOTAS_SISTEMA = {
    ACCION_ASIGNADO: "{nombre} ha tomado este caso y comenzará a trabajar en la solución.",
    ACCION_CAMBIO_ESTADO: 'Estado actualizado a "{detalle}" por {nombre}.',
    ACCION_TRANSFERIDO: 'Caso transferido a "{detalle}" por {nombre} para mejor atención.',
    ACCION_RESUELTO: "Caso marcado como RESUELTO por {nombre}. Solución aplicada exitosamente.",
    ACCION_CERRADO: "Caso CERRADO por {nombre}. Gracias por usar el sistema de soporte ITLA.",
}


def nota_sistema(accion: str, nombre: str, detalle: Optional[str] = None) -> str:
    plantilla = _NOTAS_SISTEMA.get(accion, "Acción realizada por {nombre}.")
    return plantilla.format(nombre=nombre, detalle=detalle or "")


# Mensajes para la bandeja del solicitante: (tipo, título, mensaje)
MENSAJES_ESTADO = {
    "assigned": (
        TipoNotificacionEnum.ASIGNADO,
        "Técnico Asignado",
        "Un técnico de soporte ha sido asignado a tu caso y comenzará a trabajar en él.",
    ),
    "inProgress": (
        TipoNotificacionEnum.ESTADO,
        "En Proceso",
        "Tu solicitud está siendo atendida activamente por nuestro equipo.",
    ),
    "open": (
        TipoNotificacionEnum.ESTADO,
        "Reabierto",
        "Tu solicitud fue reabierta y será revisada nuevamente por nuestro equipo.",
    ),
    "resolved": (
        TipoNotificacionEnum.RESUELTO,
        "Solicitud Resuelta",
        "Tu solicitud ha sido resuelta. Por favor verifica y confirma que todo está funcionando correctamente.",
    ),
    "closed": (
        TipoNotificacionEnum.CERRADO,
        "Caso Cerrado",
        "Este caso ha sido cerrado. Si necesitas más ayuda, puedes crear una nueva solicitud.",
    ),
    "transferred": (
        TipoNotificacionEnum.TRANSFERIDO,
        "Transferido",
        "Tu solicitud ha sido transferida al departamento correspondiente para mejor atención.",
    ),
    "note": (
        TipoNotificacionEnum.NOTA,
        "Nueva Nota",
        "El equipo de soporte agregó una nota a tu solicitud.",
    ),
}


def mensaje_solicitante(evento: str, numero: str):
    """Devuelve (tipo, texto) de la notificación para el solicitante del ticket `numero`."""
    tipo, titulo, mensaje = MENSAJES_ESTADO[evento]
    return tipo, f"[#{numero}] {titulo}: {mensaje}"
