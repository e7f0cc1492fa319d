from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, List, Tuple

from ..core.exceptions import ApiRequestError
from ..core.store import PriceStore
from ..core.utils import format_timestamp, utc_now
from ..logging_config import get_worker_logger
from .api_clients import (
    BaseApiClient,
    CoinMarketCapClient,
    FetchResult,
    OpenExchangeRatesClient,
)
from .config import ParserConfig

ErrorReporter = Callable[[str, Exception], None]


def log_fetch_error(client_name: str, exc: Exception) -> None:
    """Репортер по умолчанию: записать ошибку источника в лог."""
    status = "ERROR" if isinstance(exc, ApiRequestError) else "UNEXPECTED_ERROR"
    get_worker_logger().error(
        "PARSER_UPDATE client=%s status=%s error_type=%s error=%s",
        client_name,
        status,
        type(exc).__name__,
        exc,
    )


class RatesUpdater:
    """Один цикл обновления курсов.

    Задачи:
    - параллельный опрос всех клиентов (по потоку на источник);
    - ожидание завершения каждого из них, даже если соседний упал;
    - передача ошибок в error_reporter без прерывания цикла.

    Каждый клиент пишет в store сам, как только его ответ проверен,
    поэтому медленный источник не задерживает запись быстрого.
    """

    def __init__(
        self,
        store: PriceStore,
        clients: Iterable[BaseApiClient] | None = None,
        config: ParserConfig | None = None,
        error_reporter: ErrorReporter | None = None,
    ) -> None:
        self.store = store
        self.config = config or ParserConfig()
        # Если явно не передали клиентов — создаём дефолтные.
        if clients is None:
            self.clients: List[BaseApiClient] = [
                OpenExchangeRatesClient(self.config),
                CoinMarketCapClient(self.config),
            ]
        else:
            self.clients = list(clients)

        self.error_reporter = error_reporter or log_fetch_error
        self._logger = get_worker_logger()

    def run_update(self) -> bool:
        """Запустить один цикл обновления курсов.

        Возвращает:
            True, если хотя бы один клиент успешно обновил курсы,
            False — если ни один клиент не отработал.
        """
        logger = self._logger
        if not self.clients:
            logger.warning("PARSER_UPDATE skipped: no clients configured.")
            return False

        logger.info(
            "PARSER_UPDATE start timestamp=%s clients=%s",
            format_timestamp(utc_now()),
            [client.name for client in self.clients],
        )

        with ThreadPoolExecutor(
            max_workers=len(self.clients),
            thread_name_prefix="ratekeeper-fetch",
        ) as executor:
            futures: List[Tuple[str, Future[FetchResult]]] = []
            for client in self.clients:
                logger.info(
                    "PARSER_UPDATE client=%s status=START",
                    client.name,
                )
                futures.append(
                    (client.name, executor.submit(client.update, self.store)),
                )

            succeeded = 0
            for client_name, future in futures:
                try:
                    result = future.result()
                except Exception as exc:  # noqa: BLE001
                    self.error_reporter(client_name, exc)
                    continue

                succeeded += 1
                logger.info(
                    "PARSER_UPDATE client=%s status=OK inverted=%s pairs=%s",
                    client_name,
                    result.inverted,
                    ", ".join(sorted(result.prices)) or "-",
                )

        if not succeeded:
            logger.warning(
                "PARSER_UPDATE completed: all clients failed; "
                "cache left unchanged.",
            )
            return False

        logger.info(
            "PARSER_UPDATE completed ok=%d failed=%d cached=%d",
            succeeded,
            len(futures) - succeeded,
            len(self.store),
        )
        return True
