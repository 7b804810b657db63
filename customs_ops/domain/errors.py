"""Excepciones de dominio para operaciones aduanales y recuperación de fallas."""


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de búsqueda ===


class NotFoundError(DomainError):
    """Base para entidades inexistentes o ajenas al usuario."""


class FailureNotFoundError(NotFoundError):
    def __init__(self, failure_id: int):
        super().__init__(message="Failure not found", code="FAILURE_NOT_FOUND")
        self.failure_id = failure_id


class PackageNotFoundError(NotFoundError):
    def __init__(self, package_id: int):
        super().__init__(message="Package not found", code="PACKAGE_NOT_FOUND")
        self.package_id = package_id


class ShipmentNotFoundError(NotFoundError):
    def __init__(self, shipment_id: int):
        super().__init__(message="Shipment not found", code="SHIPMENT_NOT_FOUND")
        self.shipment_id = shipment_id


class UploadNotFoundError(NotFoundError):
    def __init__(self, upload_id: int):
        super().__init__(message="Upload not found", code="UPLOAD_NOT_FOUND")
        self.upload_id = upload_id


class DocumentNotFoundError(NotFoundError):
    def __init__(self, shipment_id: int):
        super().__init__(
            message="No verification document available", code="DOCUMENT_NOT_FOUND"
        )
        self.shipment_id = shipment_id


class UserPlatformNotFoundError(NotFoundError):
    def __init__(self, user_platform_id: int):
        super().__init__(message="Platform not found", code="PLATFORM_NOT_FOUND")
        self.user_platform_id = user_platform_id


class NoPackagesToExportError(NotFoundError):
    """El filtro de exportación no encontró paquetes."""

    def __init__(self):
        super().__init__(message="No packages found", code="NO_PACKAGES_FOUND")


# === Errores de reintento ===


class FailureAlreadyResolvedError(DomainError):
    """El registro de falla ya fue resuelto con éxito."""

    def __init__(self, failure_id: int):
        super().__init__(
            message="This failure has already been resolved",
            code="FAILURE_ALREADY_RESOLVED",
        )
        self.failure_id = failure_id


class RetryInProgressError(DomainError):
    """Otro llamador ya reclamó el registro para reintento."""

    def __init__(self, failure_id: int, current_status: str):
        super().__init__(
            message=f"Failure {failure_id} cannot be claimed for retry: status '{current_status}'",
            code="RETRY_IN_PROGRESS",
        )
        self.failure_id = failure_id
        self.current_status = current_status


class RetryNotDueError(DomainError):
    """El reintento se pidió antes de next_retry_at."""

    def __init__(self, failure_id: int, next_retry_at):
        super().__init__(
            message=f"Retry not due until {next_retry_at.isoformat()}",
            code="RETRY_NOT_DUE",
        )
        self.failure_id = failure_id
        self.next_retry_at = next_retry_at


class InvalidRetryRequestError(DomainError):
    def __init__(self, message: str = "Must provide either failure_ids or upload_id"):
        super().__init__(message=message, code="INVALID_RETRY_REQUEST")


# === Errores de estado ===


class InvalidPackageStatusError(DomainError):
    """El estado del paquete no permite la operación."""

    def __init__(self, message: str, current_status: str):
        super().__init__(message=message, code="INVALID_PACKAGE_STATUS")
        self.current_status = current_status


class InvalidShipmentStatusError(DomainError):
    def __init__(self, message: str, current_status: str):
        super().__init__(message=message, code="INVALID_SHIPMENT_STATUS")
        self.current_status = current_status


class InvalidUploadStatusError(DomainError):
    def __init__(self, message: str, current_status: str):
        super().__init__(message=message, code="INVALID_UPLOAD_STATUS")
        self.current_status = current_status


class MissingProviderIdError(DomainError):
    """La entidad no tiene identificador del proveedor de screening."""

    def __init__(self, message: str):
        super().__init__(message=message, code="MISSING_PROVIDER_ID")


class DutyAlreadyPaidError(DomainError):
    def __init__(self, package_id: int, ddpn: str):
        super().__init__(
            message=f"Duty has already been paid for this package (DDPN: {ddpn})",
            code="DUTY_ALREADY_PAID",
        )
        self.package_id = package_id
        self.ddpn = ddpn


# === Errores de validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    def __init__(self, field: str, message: str):
        super().__init__(message=message, code="VALIDATION_ERROR")
        self.field = field


class UnknownEnvironmentError(DomainError):
    """No hay gateway configurado para el ambiente solicitado."""

    def __init__(self, environment: str):
        super().__init__(
            message=f"No screening gateway configured for environment '{environment}'",
            code="UNKNOWN_ENVIRONMENT",
        )
        self.environment = environment
