from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

BASE_DIR = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class _Defaults:
    """Значения по умолчанию для конфигурации проекта."""

    logs_dir: Path = BASE_DIR / "logs"
    log_file: str = "worker.log"
    rates_url: str = "https://openexchangerates.org/api/latest.json"
    crypto_url: str = "https://api.coinmarketcap.com/v1/ticker/ethereum/"
    update_interval_ms: int = 60_000
    request_timeout: float = 10.0
    log_level: str = "INFO"
    log_format: str = (
        "%(asctime)s [%(levelname)s] %(name)s (%(threadName)s) - %(message)s"
    )


class SettingsLoader:
    """Singleton для загрузки и кеширования конфигурации проекта.

    Источник конфигурации:
    - pyproject.toml → секция [tool.ratekeeper]
    - переменная окружения RATEKEEPER_UPDATE_INTERVAL_MS (перекрывает
      update_interval_ms);
    - при отсутствии ключа используется значение по умолчанию.

    Доступные ключи:
    - logs_dir: путь к каталогу логов
    - log_file: имя файла лога внутри logs_dir
    - rates_url: адрес OpenExchangeRates (latest.json)
    - crypto_url: адрес тикера ETH в CoinMarketCap
    - update_interval_ms: пауза между циклами обновления, мс
    - request_timeout: таймаут HTTP-запроса, секунды
    - log_level: уровень логирования (DEBUG/INFO/...)
    - log_format: формат строк логов
    """

    _instance: "SettingsLoader | None" = None
    _initialized: bool = False

    def __new__(cls, *args: Any, **kwargs: Any) -> "SettingsLoader":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if self.__class__._initialized:
            return
        self.__class__._initialized = True

        self._defaults = _Defaults()
        self._config: Dict[str, Any] = {}
        self.reload()

    def _load_from_pyproject(self) -> Dict[str, Any]:
        """Загрузка конфигурации из pyproject.toml (секция [tool.ratekeeper])."""
        pyproject_path = BASE_DIR / "pyproject.toml"
        if not pyproject_path.exists():
            return {}

        with pyproject_path.open("rb") as f:
            data = tomllib.load(f)

        tool_section = data.get("tool", {})
        return tool_section.get("ratekeeper", {}) or {}

    def reload(self) -> None:
        """Полная перезагрузка конфигурации из pyproject.toml и окружения."""
        raw = self._load_from_pyproject()

        interval_raw = os.getenv("RATEKEEPER_UPDATE_INTERVAL_MS") or raw.get(
            "update_interval_ms",
            self._defaults.update_interval_ms,
        )

        cfg: Dict[str, Any] = {}
        cfg["logs_dir"] = Path(raw.get("logs_dir", self._defaults.logs_dir))
        cfg["log_file"] = str(raw.get("log_file", self._defaults.log_file))
        cfg["rates_url"] = str(raw.get("rates_url", self._defaults.rates_url))
        cfg["crypto_url"] = str(
            raw.get("crypto_url", self._defaults.crypto_url),
        )
        cfg["update_interval_ms"] = int(interval_raw)
        cfg["request_timeout"] = float(
            raw.get("request_timeout", self._defaults.request_timeout),
        )
        cfg["log_level"] = str(
            raw.get("log_level", self._defaults.log_level),
        ).upper()
        cfg["log_format"] = str(
            raw.get("log_format", self._defaults.log_format),
        )

        self._config = cfg

    def get(self, key: str, default: Any | None = None) -> Any:
        """Получить значение конфигурации по ключу.

        Если ключ не найден, возвращается default.
        """
        return self._config.get(key, default)
