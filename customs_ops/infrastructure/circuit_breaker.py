"""
pybreaker breakers guarding the screening provider, one per environment.

A sandbox outage never opens the production breaker. After FAIL_MAX
consecutive transport errors (timeouts, refused connections) the breaker
opens and calls fail fast for RESET_TIMEOUT_SECONDS, then a single trial
call decides whether it closes again. Non-2xx answers from the provider
are ordinary failures and are not counted.
"""

import logging

from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

from customs_ops.domain.value_objects.environment import Environment

logger = logging.getLogger(__name__)

FAIL_MAX = 5
RESET_TIMEOUT_SECONDS = 60


class StateChangeListener(CircuitBreakerListener):
    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        logger.warning(
            "Screening breaker %s: %s -> %s",
            self.name,
            old_state.name if old_state else "none",
            new_state.name,
            extra={"breaker_name": self.name, "new_state": new_state.name},
        )


def _build_breaker(environment: Environment) -> CircuitBreaker:
    name = f"screening_{environment.value}"
    return CircuitBreaker(
        fail_max=FAIL_MAX,
        reset_timeout=RESET_TIMEOUT_SECONDS,
        name=name,
        listeners=[StateChangeListener(name)],
        # The call that trips the breaker keeps its own transport error
        throw_new_error_on_trip=False,
    )


screening_breakers: dict[str, CircuitBreaker] = {env.value: _build_breaker(env) for env in Environment}


def breaker_for(environment: str) -> CircuitBreaker:
    return screening_breakers[getattr(environment, "value", environment)]


def reset_breakers() -> None:
    """Close every breaker. Used by tests and after a manual provider recovery."""
    for breaker in screening_breakers.values():
        breaker.close()


__all__ = [
    "screening_breakers",
    "breaker_for",
    "reset_breakers",
    "CircuitBreakerError",
]
