"""
Análisis automático de tickets por palabras clave.

Es solo una sugerencia: el servicio de tickets la usa para la prioridad cuando
el solicitante no indica una, y el endpoint `/tickets/analizar` la expone para
que el cliente la muestre antes de enviar la solicitud.
"""
import logging
from typing import Dict, List, Tuple

from soporte.schemas.enums import CategoriaTicketEnum, PrioridadTicketEnum
from soporte.schemas.triage import SugerenciaTriage

logger = logging.getLogger(__name__)

TIEMPO_URGENTE = "4-12 horas"

# (mensaje, tiempo estimado, consejos) por categoría; la prioridad por defecto es Media
RESPUESTAS_CATEGORIA: Dict[CategoriaTicketEnum, Tuple[str, str, List[str]]] = {
    CategoriaTicketEnum.EMAIL_PASS: (
        "Hemos recibido tu solicitud de recuperación de contraseña de correo institucional. "
        "Nuestro equipo de CiberSeguridad revisará tu caso y te contactará a través de tu correo personal registrado.",
        "24-48 horas",
        [
            "Verifica que tengas acceso a tu correo personal registrado",
            "Ten a mano tu número de matrícula para verificación",
            "Si es urgente, puedes acudir presencialmente al Departamento de TI",
        ],
    ),
    CategoriaTicketEnum.SIGEI_PASS: (
        "Tu solicitud de recuperación de contraseña SIGEI ha sido registrada exitosamente. "
        "El equipo de Tecnología IT procesará tu caso en breve.",
        "24-48 horas",
        [
            "Asegúrate de tener tu cédula o pasaporte disponible",
            "La nueva contraseña se enviará a tu correo institucional",
            "Si no tienes acceso al correo, indica esto en tu solicitud",
        ],
    ),
    CategoriaTicketEnum.VIRTUAL_PASS: (
        "Hemos registrado tu solicitud relacionada con la Plataforma Virtual. "
        "El Departamento de Tecnología Educativa (DTE) atenderá tu caso.",
        "24-48 horas",
        [
            'Intenta primero la opción "Olvidé mi contraseña" en la plataforma',
            "Verifica que estés usando el enlace correcto de la plataforma",
            "Ten preparado el nombre exacto de tus cursos activos",
        ],
    ),
    CategoriaTicketEnum.ACADEMIC_REQUEST: (
        "Tu solicitud académica ha sido recibida y será evaluada por el departamento correspondiente. "
        "Te mantendremos informado sobre el progreso.",
        "3-5 días hábiles",
        [
            "Adjunta cualquier documento de soporte si es necesario",
            "Incluye tu número de matrícula en la descripción",
            "Especifica claramente el tipo de solicitud",
        ],
    ),
    CategoriaTicketEnum.REDES: (
        "Tu reporte de problemas con la red ha sido registrado. El equipo de Operaciones TICs investigará el problema.",
        "12-24 horas",
        [
            "Indica la ubicación exacta donde experimentas el problema",
            "Menciona si otros estudiantes tienen el mismo problema",
            "Verifica si el problema es con WiFi o cable de red",
        ],
    ),
    CategoriaTicketEnum.EQUIPOS: (
        "Tu solicitud sobre equipos y hardware ha sido recibida. El equipo de Operaciones TICs revisará tu caso.",
        "24-72 horas",
        [
            "Describe el problema específico del equipo",
            "Indica el número de laboratorio o ubicación del equipo",
            "Menciona si el equipo muestra algún mensaje de error",
        ],
    ),
    CategoriaTicketEnum.SOFTWARE: (
        "Tu solicitud de software ha sido registrada. El equipo de Tecnología IT atenderá tu caso.",
        "24-48 horas",
        [
            "Especifica el nombre y versión del software necesario",
            "Indica para qué materia o proyecto lo necesitas",
            "Verifica si ya está disponible en los laboratorios",
        ],
    ),
    CategoriaTicketEnum.OTHER: (
        "Tu solicitud ha sido registrada en nuestro sistema. "
        "Un miembro de nuestro equipo de soporte revisará tu caso y te contactará pronto.",
        "24-72 horas",
        [
            "Proporciona la mayor cantidad de detalles posible",
            "Si tienes capturas de pantalla del problema, descríbelas",
            "Indica el mejor horario para contactarte",
        ],
    ),
}

PALABRAS_URGENTES = (
    "urgente", "emergencia", "examen", "hoy", "ahora", "inmediato", "prueba", "entrega",
    "deadline", "fecha límite", "bloqueo", "bloqueado", "no puedo entrar", "acceso denegado",
    "crítico", "importante",
)

PALABRAS_BAJA_PRIORIDAD = (
    "cuando puedan", "sin prisa", "consulta", "pregunta", "información", "duda",
    "orientación", "ayuda general",
)


def analizar_ticket(descripcion: str, categoria: CategoriaTicketEnum) -> SugerenciaTriage:
    """
    Sugiere prioridad, mensaje y tiempo estimado a partir del texto del ticket.
    Las palabras urgentes tienen precedencia sobre las de baja prioridad.
    """
    texto = descripcion.lower()
    mensaje, tiempo, consejos = RESPUESTAS_CATEGORIA[CategoriaTicketEnum(categoria)]
    prioridad = PrioridadTicketEnum.MEDIA

    if any(palabra in texto for palabra in PALABRAS_URGENTES):
        prioridad = PrioridadTicketEnum.ALTA
        tiempo = TIEMPO_URGENTE
        mensaje = (
            f"PRIORIDAD ALTA: {mensaje} "
            "Debido a la urgencia indicada, tu caso será atendido de manera prioritaria."
        )
    elif any(palabra in texto for palabra in PALABRAS_BAJA_PRIORIDAD):
        prioridad = PrioridadTicketEnum.BAJA

    logger.debug(f"Análisis de ticket ({categoria}): prioridad sugerida {prioridad.value}.")
    return SugerenciaTriage(
        prioridad=prioridad,
        mensaje=mensaje,
        tiempo_estimado=tiempo,
        consejos=list(consejos),
    )
