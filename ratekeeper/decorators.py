from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional

from .logging_config import get_worker_logger

FuncType = Callable[..., Any]


def log_action(
    action: Optional[str] = None,
    *,
    verbose: bool = False,
) -> Callable[[FuncType], FuncType]:
    """Декоратор для логирования операций чтения кеша (GET_RATE/CONVERT).

    Логируем на уровне INFO:
    - action
    - from/to коды валют и amount (если переданы именованно)
    - rate и result (если функция вернула словарь с ними)
    - result=OK/ERROR, а при исключении error_type и error_message

    Декоратор не глотает исключения — только фиксирует их в логах.
    """

    def decorator(func: FuncType) -> FuncType:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = get_worker_logger()
            act = action or func.__name__.upper()

            from_code = kwargs.get("from_code")
            to_code = kwargs.get("to_code")
            amount = kwargs.get("amount")
            amount_repr = (
                f"{float(amount):.4f}"
                if isinstance(amount, (int, float))
                else "-"
            )

            try:
                result = func(*args, **kwargs)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    f"{act} from='{from_code or '-'}' to='{to_code or '-'}' "
                    f"amount={amount_repr} result=ERROR "
                    f"error_type='{type(exc).__name__}' "
                    f"error_message='{exc}'",
                )
                raise

            rate: Optional[float] = None
            converted: Optional[float] = None
            if isinstance(result, dict):
                raw_rate = result.get("rate")
                if isinstance(raw_rate, (int, float)):
                    rate = float(raw_rate)
                raw_converted = result.get("result")
                if isinstance(raw_converted, (int, float)):
                    converted = float(raw_converted)
            elif isinstance(result, (int, float)):
                rate = float(result)

            rate_repr = f"{rate:.8f}" if rate is not None else "-"
            msg = (
                f"{act} from='{from_code or '-'}' to='{to_code or '-'}' "
                f"amount={amount_repr} rate={rate_repr} result=OK"
            )
            if verbose and converted is not None:
                msg += f" converted={converted:,.4f}"
            logger.info(msg)
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
