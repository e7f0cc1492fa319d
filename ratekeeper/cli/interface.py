from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.currencies import SUPPORTED_CURRENCIES, get_currency, is_supported
from ..core.exceptions import CurrencyNotFoundError, RateUnavailableError
from ..core.store import PriceStore
from ..core.usecases import convert, get_rate
from ..core.utils import format_timestamp, validate_currency_code
from ..parser_service.api_clients import (
    BaseApiClient,
    CoinMarketCapClient,
    OpenExchangeRatesClient,
)
from ..parser_service.config import ParserConfig
from ..parser_service.scheduler import RatesScheduler
from ..parser_service.updater import RatesUpdater

_SOURCES = ("openexchangerates", "coinmarketcap")


@dataclass
class CliSession:
    """Состояние одной CLI-сессии: кеш и (опционально) фоновый планировщик."""

    store: PriceStore = field(default_factory=PriceStore)
    config: ParserConfig = field(default_factory=ParserConfig)
    scheduler: Optional[RatesScheduler] = None


def _parse_update_rates_args(args: list[str]) -> str | None:
    """Разобрать аргументы команды update-rates.

    Поддерживается флаг:
    --source <openexchangerates|coinmarketcap>
    """
    source: str | None = None
    idx = 0

    while idx < len(args):
        token = args[idx]
        if token == "--source":
            if idx + 1 >= len(args):
                raise ValueError(
                    "Флаг --source требует значения: "
                    "openexchangerates или coinmarketcap.",
                )
            if source is not None:
                raise ValueError(
                    "Параметр --source нельзя указывать несколько раз.",
                )
            value = args[idx + 1].lower()
            if value not in _SOURCES:
                raise ValueError(
                    "Недопустимое значение для --source. "
                    "Допустимы: openexchangerates, coinmarketcap.",
                )
            source = value
            idx += 2
        else:
            raise ValueError(
                f"Неизвестный аргумент для update-rates: {token}",
            )

    return source


def _parse_start_args(args: list[str]) -> int | None:
    """Разобрать аргументы команды start: --interval <мс>."""
    interval: int | None = None

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--interval" and i + 1 < len(args):
            try:
                interval = int(args[i + 1])
            except ValueError as exc:
                raise ValueError(
                    "Значение --interval должно быть целым числом миллисекунд.",
                ) from exc
            if interval < 0:
                raise ValueError(
                    "Значение --interval не может быть отрицательным.",
                )
            i += 2
            continue
        raise ValueError(f"Неизвестный аргумент для start: {arg}")
    return interval


def _parse_pair_args(
    command: str,
    args: List[str],
    *,
    with_amount: bool = False,
) -> tuple[str, str, float | None]:
    """Разбор --from/--to (и --amount) для get-rate и convert."""
    from_code: str | None = None
    to_code: str | None = None
    amount_str: str | None = None

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--from" and i + 1 < len(args):
            from_code = validate_currency_code(args[i + 1])
            i += 2
            continue
        if arg == "--to" and i + 1 < len(args):
            to_code = validate_currency_code(args[i + 1])
            i += 2
            continue
        if with_amount and arg == "--amount" and i + 1 < len(args):
            amount_str = args[i + 1]
            i += 2
            continue
        raise ValueError(f"Неизвестный аргумент для {command}: {arg}")

    if from_code is None:
        raise ValueError("Параметр --from обязателен.")
    if to_code is None:
        raise ValueError("Параметр --to обязателен.")

    amount: float | None = None
    if with_amount:
        if amount_str is None:
            raise ValueError("Параметр --amount обязателен.")
        try:
            amount = float(amount_str)
        except ValueError as exc:
            raise ValueError(
                "'amount' должен быть положительным числом",
            ) from exc

    return from_code, to_code, amount


def _parse_show_rates_args(args: list[str]) -> str | None:
    """Разобрать аргументы команды show-rates: --currency <CODE>."""
    currency: str | None = None

    idx = 0
    while idx < len(args):
        token = args[idx]
        if token == "--currency":
            if idx + 1 >= len(args):
                raise ValueError(
                    "Флаг --currency требует значения: код валюты.",
                )
            if currency is not None:
                raise ValueError(
                    "Параметр --currency нельзя указывать несколько раз.",
                )
            currency = validate_currency_code(args[idx + 1])
            idx += 2
        else:
            raise ValueError(
                f"Неизвестный аргумент для show-rates: {token}",
            )

    return currency


def _handle_update_rates(session: CliSession, args: list[str]) -> None:
    """Обработчик команды update-rates: один цикл обновления."""
    try:
        source = _parse_update_rates_args(args)
    except ValueError as exc:
        print(str(exc))
        return

    config = session.config
    clients: list[BaseApiClient]

    if source == "openexchangerates":
        print("Источник: только OpenExchangeRates.")
        clients = [OpenExchangeRatesClient(config)]
    elif source == "coinmarketcap":
        print("Источник: только CoinMarketCap.")
        clients = [CoinMarketCapClient(config)]
    else:
        print("Источники: OpenExchangeRates и CoinMarketCap.")
        clients = [
            OpenExchangeRatesClient(config),
            CoinMarketCapClient(config),
        ]

    errors: list[str] = []

    def _collect(client_name: str, exc: Exception) -> None:
        errors.append(f"{client_name}: {exc}")

    updater = RatesUpdater(
        session.store,
        clients=clients,
        config=config,
        error_reporter=_collect,
    )
    ok = updater.run_update()

    for message in errors:
        print(f"Ошибка источника {message}")

    total_rates = len(session.store)
    if not ok:
        print("Обновление не удалось. Курсы в кеше не изменились.")
    elif errors:
        print("Обновление завершено частично.")
    else:
        print("Обновление успешно.")
    print(f"Курсов в кеше: {total_rates}.")


def _handle_start(session: CliSession, args: list[str]) -> None:
    """Обработчик команды start: фоновое периодическое обновление."""
    try:
        interval = _parse_start_args(args)
    except ValueError as exc:
        print(str(exc))
        return

    if session.scheduler is not None and session.scheduler.is_running:
        print("Фоновое обновление уже запущено. Используйте 'stop'.")
        return

    updater = RatesUpdater(session.store, config=session.config)
    scheduler = RatesScheduler(updater, interval_ms=interval)
    scheduler.start_in_background()
    session.scheduler = scheduler
    print(
        "Фоновое обновление запущено "
        f"(интервал {scheduler.interval_ms} мс).",
    )


def _handle_stop(session: CliSession, args: list[str]) -> None:
    """Обработчик команды stop."""
    if args:
        print(f"Неизвестный аргумент для stop: {args[0]}")
        return

    scheduler = session.scheduler
    if scheduler is None or not scheduler.is_running:
        print("Фоновое обновление не запущено.")
        return

    scheduler.stop()
    session.scheduler = None
    print(f"Фоновое обновление остановлено после {scheduler.cycles} циклов.")


def _handle_show_rates(session: CliSession, args: list[str]) -> None:
    """Обработчик команды show-rates."""
    try:
        currency = _parse_show_rates_args(args)
    except ValueError as exc:
        print(str(exc))
        return

    if currency is not None and not is_supported(currency):
        print(
            f"Неподдерживаемая валюта '{currency}'. "
            f"Доступны: {', '.join(SUPPORTED_CURRENCIES)}.",
        )
        return

    snapshot = session.store.snapshot()
    if not snapshot:
        print(
            "Кеш курсов пуст. "
            "Выполните 'update-rates' или 'start', чтобы загрузить данные.",
        )
        return

    entries = sorted(snapshot.values(), key=lambda entry: entry.code)
    if currency is not None:
        entries = [entry for entry in entries if entry.code == currency]
        if not entries:
            print(f"Курс для '{currency}' не найден в кеше.")
            return

    print("Rates from cache (units per 1 USD):")
    for entry in entries:
        print(
            f"- {entry.code}: {entry.price:.8f} "
            f"(updated at {format_timestamp(entry.updated_at)})",
        )


def _handle_get_rate(session: CliSession, args: List[str]) -> None:
    """Обработчик команды get-rate."""
    try:
        from_code, to_code, _ = _parse_pair_args("get-rate", args)
        rate = get_rate(session.store, from_code=from_code, to_code=to_code)
        print(f"Курс {from_code}→{to_code}: {rate:.8f}")
        if rate != 0:
            print(f"Обратный курс {to_code}→{from_code}: {1.0 / rate:.8f}")
    except CurrencyNotFoundError as exc:
        print(str(exc))
    except RateUnavailableError as exc:
        print(str(exc))
    except ValueError as exc:
        print(str(exc))


def _handle_convert(session: CliSession, args: List[str]) -> None:
    """Обработчик команды convert."""
    try:
        from_code, to_code, amount = _parse_pair_args(
            "convert",
            args,
            with_amount=True,
        )
        info = convert(
            session.store,
            from_code=from_code,
            to_code=to_code,
            amount=amount,
        )
        print(
            f"{info['amount']:,.4f} {from_code} = "
            f"{info['result']:,.8f} {to_code} "
            f"(курс {info['rate']:.8f}, обновлено: {info['updated_at']})",
        )
    except (CurrencyNotFoundError, RateUnavailableError) as exc:
        print(str(exc))
    except ValueError as exc:
        print(str(exc))


def _handle_currencies(session: CliSession, args: List[str]) -> None:
    """Обработчик команды currencies: список поддерживаемых валют."""
    for code in SUPPORTED_CURRENCIES:
        marker = "*" if code in session.store else " "
        print(f"{marker} {get_currency(code).get_display_info()}")


def _dispatch_command(
    session: CliSession,
    command: str,
    args: List[str],
) -> None:
    """Диспетчер команд CLI."""
    if command == "update-rates":
        _handle_update_rates(session, args)
    elif command == "start":
        _handle_start(session, args)
    elif command == "stop":
        _handle_stop(session, args)
    elif command == "show-rates":
        _handle_show_rates(session, args)
    elif command == "get-rate":
        _handle_get_rate(session, args)
    elif command == "convert":
        _handle_convert(session, args)
    elif command == "currencies":
        _handle_currencies(session, args)
    elif command in {"exit", "quit"}:
        print("Выход из ratekeeper.")
        raise SystemExit
    else:
        print(
            "Неизвестная команда "
            f"'{command}'. Попробуйте: update-rates, start, stop, "
            "show-rates, get-rate, convert, currencies.",
        )


def run_cli(session: CliSession | None = None) -> None:
    """Основной цикл CLI."""
    session = session or CliSession()
    print("ratekeeper CLI. Введите команду или 'exit' для выхода.")
    try:
        while True:
            try:
                raw = input("> ").strip()
            except EOFError:
                print()
                break

            if not raw:
                continue

            try:
                parts = shlex.split(raw)
            except ValueError as exc:
                print(f"Ошибка разбора команды: {exc}")
                continue

            command, *arg_tokens = parts
            try:
                _dispatch_command(session, command, arg_tokens)
            except SystemExit:
                break
    finally:
        if session.scheduler is not None:
            session.scheduler.stop()
