from typing import Dict

from fastapi import APIRouter, Depends

from soporte.api import deps
from soporte.core.events import canal_eventos
from soporte.models.usuario import Usuario as UsuarioModel

router = APIRouter()

@router.get("/version", response_model=Dict[str, int], summary="Versión actual de cada tema")
def read_versiones(
    current_user: UsuarioModel = Depends(deps.get_current_user),
) -> Dict[str, int]:
    """
    Los clientes consultan este endpoint periódicamente y vuelven a pedir
    sus listados cuando cambia la versión del tema que les interesa.
    """
    return canal_eventos.versions()
