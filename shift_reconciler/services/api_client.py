# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Base client for inter-service calls to the collaborator services.
Issues HTTP calls with the caller's session, unwraps response envelopes,
validates records into domain models and classifies every failure.
No retries: failures surface as soon as the transport reports them.
"""

import time
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from shift_reconciler.core.config import settings
from shift_reconciler.core.errors import (
    ConflictError,
    NotFoundError,
    ReconciliationError,
    TransientError,
)
from shift_reconciler.core.logging import get_logger
from shift_reconciler.core.session import SessionContext
from shift_reconciler.metrics.prometheus import (
    UPSTREAM_ERRORS,
    UPSTREAM_LATENCY,
    UPSTREAM_REQUESTS,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiClient:
    """Shared plumbing for the attendance, slot, assignment, member and business-day clients."""

    SERVICE_LABEL = "upstream"

    def __init__(
        self,
        session: SessionContext,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._session = session
        self._base_url = (base_url or settings.UPSTREAM_API_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.UPSTREAM_TIMEOUT
        self._transport = transport

    @property
    def session(self) -> SessionContext:
        return self._session

    # ── Transport ──

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        query = {k: v for k, v in (params or {}).items() if v is not None and v != ""}
        start = time.time()
        try:
            with httpx.Client(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers=self._session.headers(),
            ) as client:
                resp = client.request(method, path, params=query or None, json=json)
        except httpx.HTTPError as exc:
            UPSTREAM_ERRORS.labels(service=self.SERVICE_LABEL, kind="network").inc()
            logger.warning("%s unreachable: %s %s: %s", self.SERVICE_LABEL, method, path, exc)
            raise TransientError(
                f"{self.SERVICE_LABEL} unreachable: {exc}", code="ERR_NETWORK"
            ) from exc
        finally:
            UPSTREAM_LATENCY.labels(service=self.SERVICE_LABEL).observe(time.time() - start)

        UPSTREAM_REQUESTS.labels(
            service=self.SERVICE_LABEL, method=method, status=str(resp.status_code)
        ).inc()

        if resp.status_code >= 400:
            error = self._classify(resp)
            UPSTREAM_ERRORS.labels(
                service=self.SERVICE_LABEL, kind=type(error).__name__
            ).inc()
            logger.info(
                "%s answered %d for %s %s: %s",
                self.SERVICE_LABEL, resp.status_code, method, path, error.message,
                extra={"error_code": error.code},
            )
            raise error

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            payload = resp.json()
        except ValueError as exc:
            raise TransientError(
                f"{self.SERVICE_LABEL} returned a non-JSON body",
                code="ERR_INVALID_UPSTREAM",
            ) from exc
        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    def _classify(self, resp: httpx.Response) -> ReconciliationError:
        code: Optional[str] = None
        message = f"HTTP {resp.status_code}: {resp.reason_phrase}"
        details: dict[str, Any] = {}
        try:
            body = resp.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                code = error.get("code") or None
                message = error.get("message") or message
                details = error.get("details") or {}
            elif isinstance(body.get("detail"), str):
                message = body["detail"]

        if resp.status_code == 409:
            return ConflictError(message, code=code, details=details, upstream_status=409)
        if resp.status_code == 404:
            return NotFoundError(message, code=code, details=details, upstream_status=404)
        return TransientError(
            message,
            code=code or f"ERR_HTTP_{resp.status_code}",
            details=details,
            upstream_status=resp.status_code,
        )

    # ── Boundary validation ──

    def _parse_one(self, payload: Any, model: Type[ModelT]) -> ModelT:
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            UPSTREAM_ERRORS.labels(service=self.SERVICE_LABEL, kind="invalid_payload").inc()
            raise TransientError(
                f"{self.SERVICE_LABEL} returned an invalid {model.__name__}: {exc.error_count()} error(s)",
                code="ERR_INVALID_UPSTREAM",
            ) from exc

    def _parse_list(self, payload: Any, key: str, model: Type[ModelT]) -> list[ModelT]:
        items = payload.get(key) if isinstance(payload, dict) else payload
        if items is None:
            return []
        if not isinstance(items, list):
            raise TransientError(
                f"{self.SERVICE_LABEL} returned '{key}' that is not a list",
                code="ERR_INVALID_UPSTREAM",
            )
        return [self._parse_one(item, model) for item in items]
