from enum import Enum

DEFAULT_API_BASE = "https://eventos-node-express-back.vercel.app"
SHEET_PATH = "/api/eventSheet"

# Field groups as they come from the sheet.
CLIENT_FIELDS = [
    "nombre",
    "telefono",
    "mail",
    "lugar",
    "cantidadPersonas",
    "canal",
    "observacion",
    "fechaCliente",
    "horaCliente",
    "redireccion",
    "respuestaViaMail",
    "asignacionComercialMail",
]
EVENT_FIELDS = [
    "fechaEvento",
    "horarioInicioEvento",
    "horarioFinalizacionEvento",
    "sector",
    "vendedorComercialAsignado",
    "presupuesto",
]
META_FIELDS = ["estado", "marcaTemporal", "demora", "fechaPresupEnviado"]

TIME_FIELDS = frozenset({"horarioInicioEvento", "horarioFinalizacionEvento"})

# Fields staff complete on the data-entry form.
CARGA_FIELDS = [
    "horarioInicioEvento",
    "horarioFinalizacionEvento",
    "sector",
    "vendedorComercialAsignado",
    "presupuesto",
]
EDITABLE_FIELDS = CLIENT_FIELDS + EVENT_FIELDS + ["estado"]

STATUS_FIELD = "estado"
BUDGET_FIELD = "presupuesto"

ESTADO_PENDIENTE = "PENDIENTE"
ESTADO_ASIGNADO = "ASIGNADO"
ESTADO_PRESUPUESTO_EN_REVISION = "PRESUPUESTO EN REVISIÓN"
ESTADO_APROBADO = "APROBADO"
ESTADO_RECHAZADO = "RECHAZADO"
FINAL_STATES = frozenset({ESTADO_APROBADO, ESTADO_RECHAZADO})

OBS_TIPO_RECHAZO = "rechazo"

FIELD_LABELS = {
    "id": "ID",
    "nombre": "Nombre",
    "telefono": "Teléfono",
    "mail": "Email",
    "lugar": "Lugar",
    "cantidadPersonas": "Cantidad de Personas",
    "canal": "Canal",
    "observacion": "Mensaje del Cliente",
    "fechaCliente": "ID Fecha Cliente",
    "horaCliente": "Hora Cliente",
    "redireccion": "Redirección",
    "respuestaViaMail": "Respuesta vía Mail",
    "asignacionComercialMail": "Asignación Comercial",
    "fechaEvento": "Fecha del Evento",
    "horarioInicioEvento": "Horario Inicio Evento",
    "horarioFinalizacionEvento": "Horario Finalización Evento",
    "sector": "Sector",
    "vendedorComercialAsignado": "Comercial Asignado",
    "presupuesto": "Presupuesto",
    "estado": "Estado",
    "marcaTemporal": "Marca Temporal",
    "demora": "Demora",
    "fechaPresupEnviado": "Fecha Presupuesto Enviado",
}


class LockPolicy(str, Enum):
    """Which snapshot fields the edit form may overwrite."""

    OPEN = "open"
    FILL_EMPTY_ONLY = "fill_empty_only"


class StatusPolicy(str, Enum):
    """How ``estado`` takes part in an update."""

    MANUAL = "manual"
    SERVER = "server"
    ON_BUDGET_FILLED = "on_budget_filled"
    ON_BUDGET_CHANGED = "on_budget_changed"
