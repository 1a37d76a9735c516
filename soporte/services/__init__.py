"""
Módulo de Servicios

Este paquete contiene la lógica de negocio y las interacciones
con la base de datos para las diferentes entidades de la aplicación.

Cada módulo define un servicio (usualmente una instancia de una clase)
que encapsula las operaciones sobre un modelo ORM. Ningún servicio hace commit.
"""

from .usuario import usuario_service
from .ticket import ticket_service
from .notificacion import notificacion_service
from .dashboard import dashboard_service
from .triage import analizar_ticket
