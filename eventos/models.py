from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from eventos.presets import CLIENT_FIELDS, EVENT_FIELDS, FINAL_STATES, META_FIELDS


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def normalize_observations(raw: Any) -> List[Dict[str, str]]:
    """Coerce whatever the backend sent into ``{texto, fecha}`` items.

    Plain strings become observations without a date and entries without
    text are dropped. Order is kept (the backend sends newest first).
    """
    if not isinstance(raw, list):
        return []
    items = []
    for o in raw:
        if isinstance(o, str):
            item = {"texto": o, "fecha": ""}
        elif isinstance(o, dict):
            texto = o.get("texto")
            fecha = o.get("fecha")
            item = {
                "texto": texto if isinstance(texto, str) else "",
                "fecha": fecha if isinstance(fecha, str) else "",
            }
            if isinstance(o.get("tipo"), str):
                item["tipo"] = o["tipo"]
        else:
            continue
        if item["texto"]:
            items.append(item)
    return items


_TEXT_FIELDS = [
    f for f in CLIENT_FIELDS + EVENT_FIELDS + META_FIELDS if f != "cantidadPersonas"
]


class ObsItem(BaseModel):
    texto: str
    fecha: str = ""
    tipo: Optional[str] = None


class Cliente(BaseModel):
    """One row of the event sheet.

    Field names follow the API payload. Unknown keys are kept so the global
    search still sees them.
    """

    model_config = ConfigDict(extra="allow")

    id: str = ""
    nombre: str = ""
    telefono: str = ""
    mail: str = ""
    lugar: str = ""
    cantidadPersonas: int = 0
    canal: str = ""
    observacion: str = ""
    fechaCliente: str = ""
    horaCliente: str = ""
    redireccion: str = ""
    respuestaViaMail: str = ""
    asignacionComercialMail: str = ""
    fechaEvento: str = ""
    horarioInicioEvento: str = ""
    horarioFinalizacionEvento: str = ""
    sector: str = ""
    vendedorComercialAsignado: str = ""
    presupuesto: str = ""
    estado: str = ""
    marcaTemporal: str = ""
    demora: str = ""
    fechaPresupEnviado: str = ""
    observacionesList: List[ObsItem] = []

    @model_validator(mode="before")
    @classmethod
    def _legacy_observations(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            raw = data.get("observacionesList")
            if not isinstance(raw, list):
                raw = data.pop("observaciones", None)
            data["observacionesList"] = normalize_observations(raw)
        return data

    @field_validator("cantidadPersonas", mode="before")
    @classmethod
    def _headcount(cls, v: Any) -> int:
        try:
            return int(float(str(v).strip()))
        except (TypeError, ValueError):
            return 0

    @field_validator("id", *_TEXT_FIELDS, mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @property
    def is_final(self) -> bool:
        return self.estado.strip().upper() in FINAL_STATES

    def wire_fields(self) -> Dict[str, Any]:
        """Flat wire fields without the observation list."""
        return self.model_dump(exclude={"observacionesList"})


class HistoryEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    field: str = ""
    oldValue: str = ""
    newValue: str = ""
    timestamp: str = ""
    user: str = ""

    @field_validator("field", "oldValue", "newValue", "timestamp", "user", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)
