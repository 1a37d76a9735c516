from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from soporte.core.config import settings
# Registra los hooks de commit/rollback del canal de eventos sobre Session
import soporte.core.events  # noqa: F401

# pool_pre_ping habilita una comprobación de conexión antes de usarla del pool
engine = create_engine(str(settings.DATABASE_URI), pool_pre_ping=True)

# Crear una fábrica de sesiones
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
