from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Mapping, Optional

from .utils import utc_now


@dataclass(frozen=True)
class PriceEntry:
    """Последний известный курс: сколько единиц code стоит 1 USD."""

    code: str
    price: float
    updated_at: datetime = field(default_factory=utc_now)


class PriceStore:
    """Потокобезопасная таблица текущих курсов.

    Все чтения и записи идут через один замок экземпляра, поэтому
    читатель всегда видит целую запись, сохранённую каким-то save().
    Хранилище не знает о «свежести»: старые значения не истекают,
    если циклы обновления перестали проходить.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, PriceEntry] = {}

    def save(self, code: str, price: float) -> None:
        """Вставить или перезаписать курс для code. Не валидирует price."""
        entry = PriceEntry(code=code, price=price)
        with self._lock:
            self._entries[code] = entry

    def save_many(self, prices: Mapping[str, float]) -> None:
        """Сохранить набор курсов за один захват замка."""
        now = utc_now()
        entries = {
            code: PriceEntry(code=code, price=price, updated_at=now)
            for code, price in prices.items()
        }
        with self._lock:
            self._entries.update(entries)

    def get(self, code: str) -> Optional[float]:
        """Последний сохранённый курс или None, если его ещё не было."""
        entry = self.get_entry(code)
        if entry is None:
            return None
        return entry.price

    def get_entry(self, code: str) -> Optional[PriceEntry]:
        with self._lock:
            return self._entries.get(code)

    def snapshot(self) -> Dict[str, PriceEntry]:
        """Поверхностная копия всех записей на текущий момент."""
        with self._lock:
            return dict(self._entries)

    def __contains__(self, code: object) -> bool:
        with self._lock:
            return code in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
