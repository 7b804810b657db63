from customs_ops.domain.value_objects.environment import Environment
from customs_ops.domain.value_objects.provider_endpoint import (
    AUTO_RETRYABLE_ENDPOINTS,
    ProviderEndpoint,
    is_auto_retryable,
)
from customs_ops.domain.value_objects.retry_schedule import (
    RETRY_DELAYS_MS,
    next_retry_at,
    retry_delay,
)

__all__ = [
    "Environment",
    "ProviderEndpoint",
    "AUTO_RETRYABLE_ENDPOINTS",
    "is_auto_retryable",
    "RETRY_DELAYS_MS",
    "retry_delay",
    "next_retry_at",
]
