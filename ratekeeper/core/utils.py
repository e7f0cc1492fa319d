from __future__ import annotations

import math
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Текущий момент в UTC без микросекунд."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def format_timestamp(ts: datetime) -> str:
    """ISO-строка в UTC, оканчивающаяся на 'Z'."""
    ts = ts.astimezone(timezone.utc).replace(microsecond=0)
    return ts.isoformat().replace("+00:00", "Z")


def validate_amount(amount: float) -> float:
    """Проверка суммы: число > 0. Возвращает сумму как float."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise TypeError("Сумма должна быть числом.")
    value = float(amount)
    if not math.isfinite(value):
        raise ValueError("Сумма должна быть конечным числом.")
    if value <= 0:
        raise ValueError("Сумма должна быть положительной.")
    return value


def validate_currency_code(code: str) -> str:
    """Проверка кода валюты: непустая строка без пробелов по краям.

    Регистр не меняем — коды поддерживаемых валют регистрозависимы.
    """
    if not isinstance(code, str):
        raise TypeError("Код валюты должен быть строкой.")
    normalized = code.strip()
    if not normalized:
        raise ValueError("Код валюты не может быть пустым.")
    return normalized


def validate_interval_ms(interval_ms: int) -> int:
    """Проверка интервала обновления: целое число миллисекунд >= 0."""
    if isinstance(interval_ms, bool) or not isinstance(interval_ms, int):
        raise TypeError("Интервал обновления должен быть целым числом.")
    if interval_ms < 0:
        raise ValueError("Интервал обновления не может быть отрицательным.")
    return interval_ms
