"""
Calendario fijo de backoff para reintentos de llamadas fallidas.

El retraso depende solo del número de intentos ya realizados:
1er reintento 60s, 2do 300s, 3ro 900s; índices mayores usan el último valor.
"""

from datetime import datetime, timedelta

RETRY_DELAYS_MS: tuple[int, ...] = (60_000, 300_000, 900_000)


def retry_delay(retry_count: int) -> timedelta:
    """
    Retorna el retraso para el intento indicado.

    Args:
        retry_count: Intentos realizados hasta ahora (0 al registrar la falla).

    Returns:
        timedelta con el retraso, acotado al último valor de la tabla.
    """
    index = min(max(retry_count, 0), len(RETRY_DELAYS_MS) - 1)
    return timedelta(milliseconds=RETRY_DELAYS_MS[index])


def next_retry_at(now: datetime, retry_count: int) -> datetime:
    """Calcula now + delay[min(retry_count, len(delay) - 1)]."""
    return now + retry_delay(retry_count)
