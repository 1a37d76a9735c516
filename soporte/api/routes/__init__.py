from fastapi import APIRouter

# Importar los routers individuales de cada módulo
from . import auth, usuarios, tickets, notificaciones, dashboard, eventos

# Crear el router principal de la API
api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(usuarios.router, prefix="/usuarios", tags=["Usuarios"])
api_router.include_router(tickets.router, prefix="/tickets", tags=["Tickets"])
api_router.include_router(notificaciones.router, prefix="/notificaciones", tags=["Notificaciones"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(eventos.router, prefix="/eventos", tags=["Eventos"])
