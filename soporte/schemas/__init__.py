from .common import Msg

# Token & Auth
from .token import Token, TokenPayload
from .password import PasswordChange

# Usuarios
from .usuario import (
    Usuario,
    UsuarioSimple,
    EstudianteCreate,
    PersonalCreate,
    PerfilUpdate,
    CategoriasUpdate,
)

# Tickets
from .ticket import (
    Ticket,
    TicketSimple,
    TicketCreate,
    TicketEstadoUpdate,
    TicketTransferencia,
    TicketPrioridadUpdate,
    TicketReporte,
    SolicitanteReporte,
    NotaTicket,
    NotaTicketCreate,
)

# Notificaciones
from .notificacion import Notificacion, NotificacionCreateInternal, NotificacionUpdate, NotificacionesNoLeidas

# Dashboard y análisis
from .dashboard import DashboardData, TicketStats
from .triage import SugerenciaTriage, TriageRequest
