"""Error taxonomy surfaced to staff as inline messages."""
from __future__ import annotations

from typing import Optional


class CrmError(Exception):
    """Base error; ``str(err)`` is the user-facing text."""

    default_message = "Ocurrió un error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NotFoundError(CrmError, LookupError):
    default_message = "No se encontró el cliente"


class RecordValidationError(CrmError, ValueError):
    default_message = "Datos inválidos"


class NothingToSaveError(RecordValidationError):
    default_message = "No hay campos nuevos para agregar (todos ya tienen datos)."


class ApiError(CrmError):
    default_message = "No se pudo completar la operación"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SubmitLockedError(CrmError):
    default_message = "Ya se está guardando, esperá unos segundos."


class StatusFinalError(CrmError):
    default_message = "El estado ya es definitivo y no puede cambiarse."
