"""eventSheet REST client.

Thin synchronous wrapper over ``httpx.Client``. Every response uses the
``{data, message?}`` envelope; non-2xx answers carry the user-facing error
text in ``message``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

import httpx

from core.errors import ApiError, NotFoundError, RecordValidationError
from eventos.models import Cliente, HistoryEntry, ObsItem, normalize_observations
from eventos.presets import DEFAULT_API_BASE, SHEET_PATH

logger = logging.getLogger(__name__)


class EventSheetClient:
    """Client for ``/api/eventSheet``.

    Pass ``http_client`` to reuse a configured ``httpx.Client`` (tests use one
    backed by ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        timeout: float = 15.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def _url(self, *parts: str) -> str:
        path = "/".join(quote(str(p).strip(), safe="") for p in parts)
        return f"{self._base_url}{SHEET_PATH}" + (f"/{path}" if path else "")

    def _request(
        self,
        method: str,
        url: str,
        json: Optional[Mapping[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(method, url, json=json)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise ApiError(error_message) from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        if response.status_code == 404:
            logger.info("%s %s → 404", method, url)
            raise NotFoundError(body.get("message"))
        if not response.is_success:
            message = body.get("message") or body.get("error") or error_message
            logger.warning("%s %s → %s: %s", method, url, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)
        return body

    # -- records ---------------------------------------------------------

    def list_records(self) -> List[Cliente]:
        body = self._request("GET", self._url(), error_message="No se pudieron cargar los clientes")
        rows = body.get("data") or []
        records = [Cliente.model_validate(row) for row in rows if isinstance(row, dict)]
        logger.info("Loaded %d records", len(records))
        return records

    def get_record(self, record_id: str) -> Cliente:
        clean = str(record_id or "").strip()
        if not clean:
            raise RecordValidationError("Debes ingresar el ID Cliente")
        body = self._request("GET", self._url(clean), error_message="Error al buscar el cliente")
        data = body.get("data")
        if not data or not isinstance(data, dict):
            raise NotFoundError(body.get("message"))
        if not data.get("id"):
            data["id"] = clean
        return Cliente.model_validate(data)

    def create_record(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Create a row; the id is assigned by the sheet, never sent."""
        payload = {k: v for k, v in fields.items() if k != "id"}
        body = self._request("POST", self._url(), json=payload, error_message="No se pudo crear el cliente")
        logger.info("Created record for %s", payload.get("nombre", ""))
        return body

    def update_record(
        self,
        record_id: str,
        changes: Mapping[str, Any],
        change_log: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(changes)
        payload.pop("id", None)
        if change_log:
            payload["changeLog"] = change_log
        body = self._request("PUT", self._url(record_id), json=payload, error_message="No se pudo guardar")
        logger.info("Updated record %s: %s", record_id, sorted(changes))
        return body

    # -- observations / history -----------------------------------------

    def list_observations(self, record_id: str) -> List[ObsItem]:
        body = self._request(
            "GET", self._url(record_id, "observaciones"), error_message="No se pudieron cargar las observaciones"
        )
        return [ObsItem.model_validate(o) for o in normalize_observations(body.get("data"))]

    def add_observation(self, record_id: str, texto: str, tipo: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"texto": texto}
        if tipo:
            payload["tipo"] = tipo
        return self._request(
            "POST",
            self._url(record_id, "observaciones"),
            json=payload,
            error_message="No se pudo guardar la observación",
        )

    def get_audit(self, record_id: str) -> List[HistoryEntry]:
        body = self._request("GET", self._url(record_id, "audit"), error_message="No se pudo cargar el historial")
        rows = body.get("data") or []
        return [HistoryEntry.model_validate(row) for row in rows if isinstance(row, dict)]
