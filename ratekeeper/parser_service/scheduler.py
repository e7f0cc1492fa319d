from __future__ import annotations

import threading
from typing import Optional

from ..core.utils import validate_interval_ms
from ..logging_config import get_worker_logger
from .updater import RatesUpdater


class RatesScheduler:
    """Бесконечный цикл обновления: Fetching → Idle → Fetching ...

    Интервал фиксирован на всё время жизни планировщика, без backoff:
    следующий цикл и есть повторная попытка для упавшего источника.
    stop() прерывает только паузу между циклами; идущий опрос
    источников не отменяется.
    """

    def __init__(
        self,
        updater: RatesUpdater,
        interval_ms: int | None = None,
    ) -> None:
        self.updater = updater
        if interval_ms is None:
            interval_ms = updater.config.update_interval_ms
        self.interval_ms = validate_interval_ms(interval_ms)
        self.cycles = 0

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._logger = get_worker_logger()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self, max_cycles: int | None = None) -> None:
        """Крутить циклы до stop() или до max_cycles завершённых циклов."""
        logger = self._logger
        logger.info(
            "SCHEDULER start interval_ms=%d max_cycles=%s",
            self.interval_ms,
            max_cycles if max_cycles is not None else "-",
        )

        while not self._stop_event.is_set():
            try:
                ok = self.updater.run_update()
                status = "OK" if ok else "FAILED"
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "SCHEDULER cycle=%d status=UNEXPECTED_ERROR "
                    "error_type=%s error=%s",
                    self.cycles + 1,
                    type(exc).__name__,
                    exc,
                )
                status = "ERROR"
            self.cycles += 1
            logger.info(
                "SCHEDULER cycle=%d status=%s",
                self.cycles,
                status,
            )

            if max_cycles is not None and self.cycles >= max_cycles:
                break

            # Event.wait вместо time.sleep: stop() будит паузу сразу.
            self._stop_event.wait(self.interval_ms / 1000)

        logger.info("SCHEDULER stopped cycles=%d", self.cycles)

    def start_in_background(self) -> threading.Thread:
        """Запустить run() в фоновом daemon-потоке."""
        if self.is_running:
            raise RuntimeError("Планировщик уже запущен.")

        self._stop_event.clear()
        thread = threading.Thread(
            target=self.run,
            name="ratekeeper-scheduler",
            daemon=True,
        )
        self._thread = thread
        thread.start()
        return thread

    def stop(self, timeout: float | None = None) -> None:
        """Попросить цикл остановиться и дождаться фонового потока.

        Если поток не успел завершиться за timeout, ссылка на него
        сохраняется: is_running остаётся True до конца текущего цикла.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if not self._thread.is_alive():
                self._thread = None
