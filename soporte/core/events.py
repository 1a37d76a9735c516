# =================================================================
# Canal de Notificación / Refresco
# =================================================================
# Registro de observadores por tema. Los servicios no publican
# directamente: encolan el evento en la sesión y este módulo lo
# entrega solo cuando la transacción se confirma.
# =================================================================
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import event
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

TOPIC_TICKETS = "tickets"
TOPIC_USUARIOS = "usuarios"
TOPICS = (TOPIC_TICKETS, TOPIC_USUARIOS)

Listener = Callable[[Dict[str, Any]], None]

_PENDING_KEY = "eventos_pendientes"


class CanalEventos:
    """
    Entrega "al menos una vez" y de mejor esfuerzo: si un oyente falla se
    registra el error y se continúa con los demás. Cada tema lleva un contador
    de versión monotónico para los clientes que prefieren consultar periódicamente.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: Dict[str, List[Listener]] = {}
        self._versions: Dict[str, int] = {topic: 0 for topic in TOPICS}

    def subscribe(self, topic: str, listener: Listener) -> Callable[[], None]:
        """Registra `listener` y devuelve la función que lo da de baja."""
        with self._lock:
            self._listeners.setdefault(topic, []).append(listener)
        logger.debug(f"Oyente registrado en tema '{topic}'.")

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(topic, [])
                if listener in listeners:
                    listeners.remove(listener)
                    logger.debug(f"Oyente dado de baja del tema '{topic}'.")

        return unsubscribe

    def publish(self, topic: str, payload: Optional[Dict[str, Any]] = None) -> int:
        with self._lock:
            version = self._versions.get(topic, 0) + 1
            self._versions[topic] = version
            listeners = list(self._listeners.get(topic, []))

        event_data = dict(payload or {})
        event_data.setdefault("topic", topic)
        event_data["version"] = version
        for listener in listeners:
            try:
                listener(event_data)
            except Exception as e:
                logger.error(f"Error en oyente del tema '{topic}' (versión {version}): {e}", exc_info=True)
        logger.debug(f"Evento publicado en '{topic}' (versión {version}) a {len(listeners)} oyente(s).")
        return version

    def version(self, topic: str) -> int:
        with self._lock:
            return self._versions.get(topic, 0)

    def versions(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._versions)


canal_eventos = CanalEventos()


def queue_event(db: Session, topic: str, payload: Optional[Dict[str, Any]] = None) -> None:
    """Encola un evento para publicarlo cuando la sesión haga commit."""
    db.info.setdefault(_PENDING_KEY, []).append((topic, payload or {}))


@event.listens_for(Session, "after_commit")
def _publicar_eventos_pendientes(session: Session) -> None:
    pendientes = session.info.pop(_PENDING_KEY, [])
    for topic, payload in pendientes:
        canal_eventos.publish(topic, payload)


@event.listens_for(Session, "after_soft_rollback")
def _descartar_eventos_pendientes(session: Session, previous_transaction) -> None:
    descartados = session.info.pop(_PENDING_KEY, [])
    if descartados:
        logger.info(f"Rollback: se descartan {len(descartados)} evento(s) pendiente(s).")
