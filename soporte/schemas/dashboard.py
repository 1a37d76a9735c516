from typing import Dict

from pydantic import BaseModel, Field

# Estadísticas calculadas sobre los tickets visibles para quien consulta
class TicketStats(BaseModel):
    total: int = Field(..., ge=0)
    abiertos: int = Field(..., ge=0)
    en_proceso: int = Field(..., ge=0)
    resueltos: int = Field(..., ge=0)
    cerrados: int = Field(..., ge=0)
    creados_hoy: int = Field(..., ge=0)
    resueltos_hoy: int = Field(..., ge=0)

class DashboardData(BaseModel):
    stats: TicketStats
    por_categoria: Dict[str, int] = Field(..., description="Tickets visibles agrupados por categoría")
    por_prioridad: Dict[str, int] = Field(..., description="Tickets visibles agrupados por prioridad")
    notificaciones_no_leidas: int = Field(..., ge=0)
