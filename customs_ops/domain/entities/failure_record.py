"""Entidad FailureRecord - llamada fallida a la API del proveedor, con contexto para repetirla."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from customs_ops.domain.value_objects.provider_endpoint import is_auto_retryable
from customs_ops.domain.value_objects.retry_schedule import next_retry_at

DEFAULT_MAX_RETRIES = 3
MANUAL_MAX_RETRIES = 1

MAX_RETRIES_NOTE = "Maximum retry attempts reached"
UNSUPPORTED_ENDPOINT_NOTE = "Unsupported endpoint for automatic retry"
MANUAL_RESOLUTION_NOTE = "Manually resolved by user"


class RetryStatus(str, Enum):
    """Estados de la máquina de reintentos."""

    PENDING = "pending"
    RETRYING = "retrying"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    MANUAL_REQUIRED = "manual_required"


CLAIMABLE_STATUSES = (RetryStatus.PENDING, RetryStatus.MANUAL_REQUIRED)
TERMINAL_STATUSES = (RetryStatus.SUCCESS, RetryStatus.EXHAUSTED, RetryStatus.MANUAL_REQUIRED)


@dataclass
class FailureRecord:
    """
    Registro durable de una llamada fallida al proveedor.

    `request_body` es la solicitud exacta que falló y se re-envía sin cambios
    en cada reintento. `retry_count` nunca supera `max_retries`.
    """

    id: int | None = None
    user_id: str = ""

    # Contexto
    endpoint: str = ""
    method: str = "POST"
    environment: str = "sandbox"
    upload_id: int | None = None
    package_id: int | None = None
    shipment_id: int | None = None
    external_id: str | None = None
    row_number: int | None = None

    request_body: dict[str, Any] = field(default_factory=dict)

    # Error
    status_code: int | None = None
    error_code: str | None = None
    error_message: str | None = None
    error_details: dict[str, Any] | None = None

    # Reintentos
    retry_status: RetryStatus = RetryStatus.PENDING
    retry_count: int = 0
    max_retries: int = DEFAULT_MAX_RETRIES
    last_retry_at: datetime | None = None
    next_retry_at: datetime | None = None

    # Resolución
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    resolution_notes: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    # === Propiedades ===

    @property
    def is_terminal(self) -> bool:
        return self.retry_status in TERMINAL_STATUSES

    @property
    def budget_exhausted(self) -> bool:
        return self.retry_count >= self.max_retries

    @property
    def is_auto_retryable(self) -> bool:
        return is_auto_retryable(self.endpoint)

    @property
    def is_claimable(self) -> bool:
        """Puede pasar a `retrying`: estado reclamable y presupuesto disponible."""
        return self.retry_status in CLAIMABLE_STATUSES and not self.budget_exhausted

    def is_due(self, now: datetime) -> bool:
        """Solo los registros `pending` respetan el calendario de backoff."""
        if self.retry_status != RetryStatus.PENDING or self.next_retry_at is None:
            return True
        return _as_comparable(now, self.next_retry_at) >= self.next_retry_at

    # === Métodos de negocio ===

    def mark_retrying(self, now: datetime) -> None:
        self.retry_status = RetryStatus.RETRYING
        self.last_retry_at = now

    def mark_succeeded(
        self,
        now: datetime,
        resolved_by: str,
        package_id: int | None,
        note_template: str = "Retry successful on attempt {attempt}",
    ) -> None:
        """Cierra el registro tras un reintento exitoso."""
        self.retry_count += 1
        self.retry_status = RetryStatus.SUCCESS
        self.next_retry_at = None
        self.resolved_at = now
        self.resolved_by = resolved_by
        self.resolution_notes = note_template.format(attempt=self.retry_count)
        if package_id is not None:
            self.package_id = package_id

    def register_failed_attempt(
        self,
        now: datetime,
        error_message: str,
        error_code: str | None = None,
        error_details: dict[str, Any] | None = None,
        exhausted_note: str = MAX_RETRIES_NOTE,
    ) -> None:
        """
        Registra un intento fallido.

        Agenda el siguiente intento con el backoff fijo, o marca el registro
        como `exhausted` cuando el presupuesto se agota.
        """
        self.retry_count = min(self.retry_count + 1, self.max_retries)
        self.error_message = error_message
        self.error_code = error_code
        self.error_details = error_details
        if self.budget_exhausted:
            self.mark_exhausted(now, exhausted_note)
            return
        self.retry_status = RetryStatus.PENDING
        self.next_retry_at = next_retry_at(now, self.retry_count)

    def mark_exhausted(self, now: datetime, notes: str = MAX_RETRIES_NOTE) -> None:
        self.retry_status = RetryStatus.EXHAUSTED
        self.next_retry_at = None
        self.resolved_at = now
        self.resolution_notes = notes

    def mark_manual_required(self, now: datetime, notes: str) -> None:
        """Deriva el registro a intervención humana, sin consumir presupuesto ni mover `resolved_at`."""
        self.retry_status = RetryStatus.MANUAL_REQUIRED
        self.next_retry_at = None
        self.resolved_at = self.resolved_at or now
        self.resolution_notes = notes

    def resolve_manually(self, now: datetime, resolved_by: str, notes: str | None) -> None:
        """
        Resolución manual explícita.

        Conserva el primer `resolved_at` si el registro ya estaba resuelto.
        """
        self.retry_status = RetryStatus.MANUAL_REQUIRED
        self.next_retry_at = None
        self.resolved_at = self.resolved_at or now
        self.resolved_by = resolved_by
        self.resolution_notes = notes or MANUAL_RESOLUTION_NOTE

    @classmethod
    def create(
        cls,
        user_id: str,
        endpoint: str,
        environment: str,
        request_body: dict[str, Any],
        now: datetime,
        error_message: str | None,
        error_code: str | None = None,
        error_details: dict[str, Any] | None = None,
        status_code: int | None = None,
        method: str = "POST",
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_status: RetryStatus = RetryStatus.PENDING,
        upload_id: int | None = None,
        package_id: int | None = None,
        shipment_id: int | None = None,
        external_id: str | None = None,
        row_number: int | None = None,
    ) -> "FailureRecord":
        """Factory: registro nuevo con retry_count=0 y el primer reintento agendado."""
        return cls(
            user_id=user_id,
            endpoint=endpoint,
            method=method,
            environment=environment,
            upload_id=upload_id,
            package_id=package_id,
            shipment_id=shipment_id,
            external_id=external_id,
            row_number=row_number,
            request_body=request_body,
            status_code=status_code,
            error_code=error_code,
            error_message=error_message,
            error_details=error_details,
            retry_status=retry_status,
            retry_count=0,
            max_retries=max_retries,
            next_retry_at=next_retry_at(now, 0) if retry_status == RetryStatus.PENDING else None,
            created_at=now,
            updated_at=now,
        )


def _as_comparable(now: datetime, reference: datetime) -> datetime:
    # SQLite devuelve datetimes naive; se alinea now con la referencia
    if reference.tzinfo is None and now.tzinfo is not None:
        return now.replace(tzinfo=None)
    return now
