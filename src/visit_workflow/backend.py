"""
Clinical records backend client.

Thin async wrapper over httpx for the REST-like records backend. Reads raise
TransportError and writes raise WriteError, so callers never deal with
httpx exceptions directly. Every list response goes through the response
normalizer before it is returned.
"""

import logging
from typing import Any, Optional

import httpx

from .errors import PatientNotFoundError, TransportError, WriteError
from .normalizer import extract_records
from .records import RecordKind

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api"
DEFAULT_TIMEOUT = 10.0

PATIENTS_PATH = "/patients/"

RESOURCE_PATHS = {
    RecordKind.VITALS: "/vitals/",
    RecordKind.GENERAL_ASSESSMENT: "/general-assessments/",
    RecordKind.OVERWEIGHT_ASSESSMENT: "/overweight-assessments/",
}


def format_backend_errors(payload: Any) -> str:
    """Flatten a backend error body into one readable message.

    Field errors such as {"height_cm": ["Too large."]} become
    "height_cm: Too large."; a "detail" key is used as-is.
    """
    if isinstance(payload, dict):
        if isinstance(payload.get("detail"), str):
            return payload["detail"]
        parts = []
        for key, value in payload.items():
            if isinstance(value, list):
                value = ", ".join(str(v) for v in value)
            parts.append(f"{key}: {value}")
        return ". ".join(parts)
    if isinstance(payload, str):
        return payload
    return ""


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class BackendClient:
    """Async client for the patients, vitals and assessments resources."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Backend API root, e.g. http://localhost:8000/api
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json"},
            transport=transport,
            event_hooks={
                "request": [self._log_request],
                "response": [self._log_response],
            },
        )

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    async def _log_request(request: httpx.Request) -> None:
        logger.debug(f"[BACKEND] {request.method} {request.url}")

    @staticmethod
    async def _log_response(response: httpx.Response) -> None:
        request = response.request
        logger.debug(f"[BACKEND] {request.method} {request.url} -> {response.status_code}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.warning(f"[BACKEND] GET {path} timed out: {e}")
            raise TransportError(f"GET {path} timed out", timeout=True) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"[BACKEND] GET {path} failed with status {status}")
            raise TransportError(f"GET {path} failed with status {status}", status_code=status) from e
        except httpx.HTTPError as e:
            logger.warning(f"[BACKEND] GET {path} failed: {e}")
            raise TransportError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            logger.warning(f"[BACKEND] GET {path} returned invalid JSON")
            raise TransportError(f"GET {path} returned invalid JSON") from e

    async def list_patients(self) -> list:
        """Fetch every patient record."""
        return extract_records(await self._get(PATIENTS_PATH))

    async def get_patient(self, patient_id: str) -> dict:
        """
        Fetch one patient by backend id.

        The record may arrive bare or wrapped as {"data": {...}} or
        {"results": {...}}.

        Raises:
            PatientNotFoundError: the backend answered 404
            TransportError: the read failed or the payload has no patient id
        """
        try:
            payload = await self._get(f"{PATIENTS_PATH}{patient_id}/")
        except TransportError as e:
            if e.status_code == 404:
                raise PatientNotFoundError(patient_id) from e
            raise

        if isinstance(payload, dict) and payload.get("id") is None:
            for key in ("data", "results"):
                if isinstance(payload.get(key), dict):
                    payload = payload[key]
                    break

        if not isinstance(payload, dict) or payload.get("id") is None:
            logger.warning(f"[BACKEND] Patient payload for {patient_id} has no id")
            raise TransportError(f"Unexpected patient payload for {patient_id}")
        return payload

    async def list_records(self, kind: RecordKind, patient_id: str) -> list:
        """
        Fetch every record of one kind for a patient.

        Filters with ?patient= first and retries once with ?patient_id=
        when that read fails for a reason other than a timeout.

        Raises:
            TransportError: both filtered reads failed
        """
        path = RESOURCE_PATHS[kind]
        try:
            payload = await self._get(path, params={"patient": patient_id})
        except TransportError as e:
            if e.timeout:
                raise
            logger.info(f"[BACKEND] Retrying {kind.value} read for {patient_id} with patient_id filter")
            payload = await self._get(path, params={"patient_id": patient_id})
        return extract_records(payload)

    # ------------------------------------------------------------------
    # Writes (never retried)
    # ------------------------------------------------------------------

    async def _post(self, path: str, data: dict) -> dict:
        try:
            response = await self._client.post(path, json=data)
        except httpx.TimeoutException as e:
            logger.error(f"[BACKEND] POST {path} timed out: {e}")
            raise WriteError(f"Request to {path} timed out. The record was not saved.") from e
        except httpx.HTTPError as e:
            logger.error(f"[BACKEND] POST {path} failed: {e}")
            raise WriteError(f"Could not reach the records backend: {e}") from e

        if response.is_error:
            body = _error_body(response)
            message = format_backend_errors(body) or f"Backend returned status {response.status_code}"
            logger.error(f"[BACKEND] POST {path} rejected ({response.status_code}): {message}")
            raise WriteError(
                message,
                status_code=response.status_code,
                retryable=response.status_code >= 500,
            )

        try:
            created = response.json()
        except ValueError:
            created = {}
        return created if isinstance(created, dict) else {}

    async def create_patient(self, data: dict) -> dict:
        return await self._post(PATIENTS_PATH, data)

    async def create_record(self, kind: RecordKind, data: dict) -> dict:
        return await self._post(RESOURCE_PATHS[kind], data)
