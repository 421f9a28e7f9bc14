"""
Cache úložiště pro RUIAN klienta.

Klient ukládá pouze úspěšně dekódované odpovědi (JSON-kompatibilní data).
Úložiště je samostatný kolaborátor, lze předat vlastní implementaci
protokolu CacheStorage (např. Redis wrapper).

Dostupné implementace:
- MemoryCache: in-memory slovník s TTL
- SQLiteCache: perzistentní cache v SQLite souboru
"""

import hashlib
import json
import logging
import sqlite3
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


def make_cache_key(endpoint: str, params: dict[str, Any]) -> str:
    """
    Vytvoří cache klíč z endpointu a parametrů.

    Parametry jsou seřazeny podle klíče, takže pořadí vložení nehraje roli.
    """
    serialized = json.dumps(params, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.md5(f"{endpoint}|{serialized}".encode()).hexdigest()


class CacheStorage(Protocol):
    """Key-value úložiště s expirací."""

    def load(self, key: str) -> Any | None: ...

    def save(self, key: str, value: Any, ttl: int) -> None: ...

    def clear(self, namespace: str) -> None: ...


@dataclass
class CacheEntry:
    """Položka v cache."""

    data: Any
    expires_at: float

    def is_valid(self, now: float) -> bool:
        """Zkontroluje, zda je cache stále platná."""
        return now < self.expires_at


class MemoryCache:
    """In-memory cache s TTL."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._cache: dict[str, CacheEntry] = {}
        self._clock = clock
        self._lock = threading.Lock()

    def load(self, key: str) -> Any | None:
        """Získej hodnotu z cache."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if not entry.is_valid(self._clock()):
                del self._cache[key]
                return None

            return entry.data

    def save(self, key: str, value: Any, ttl: int) -> None:
        """Ulož hodnotu do cache."""
        with self._lock:
            now = self._clock()
            self._cache[key] = CacheEntry(data=value, expires_at=now + ttl)
            self._cleanup(now)

    def _cleanup(self, now: float) -> None:
        """Vyčisti expirované záznamy."""
        expired = [k for k, v in self._cache.items() if not v.is_valid(now)]
        for key in expired:
            del self._cache[key]

    def clear(self, namespace: str) -> None:
        """Vymaž všechny záznamy daného namespace."""
        prefix = f"{namespace}:"
        with self._lock:
            keys = [k for k in self._cache if k.startswith(prefix)]
            for key in keys:
                del self._cache[key]
        logger.debug(f"Memory cache cleared ({len(keys)} entries in '{namespace}')")

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


class SQLiteCache:
    """
    Perzistentní cache v SQLite.

    Hodnoty se ukládají jako JSON, expirované řádky se mažou při čtení.
    """

    def __init__(self, db_path: str | Path, clock: Callable[[], float] = time.time):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._init_schema()

    def _init_schema(self) -> None:
        with self._lock:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS ruian_cache (
                    key TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL,
                    expires_at REAL NOT NULL
                )
                """
            )
            self._conn.commit()

    def load(self, key: str) -> Any | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value_json, expires_at FROM ruian_cache WHERE key = ?",
                (key,),
            ).fetchone()
            if row is None:
                return None

            value_json, expires_at = row
            if self._clock() >= expires_at:
                self._conn.execute("DELETE FROM ruian_cache WHERE key = ?", (key,))
                self._conn.commit()
                return None

        return json.loads(value_json)

    def save(self, key: str, value: Any, ttl: int) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO ruian_cache (key, value_json, expires_at) VALUES (?, ?, ?)",
                (key, payload, self._clock() + ttl),
            )
            self._conn.commit()

    def clear(self, namespace: str) -> None:
        prefix = f"{namespace}:"
        with self._lock:
            cur = self._conn.execute(
                "DELETE FROM ruian_cache WHERE substr(key, 1, ?) = ?",
                (len(prefix), prefix),
            )
            self._conn.commit()
        logger.debug(f"SQLite cache cleared ({cur.rowcount} entries in '{namespace}')")

    def close(self) -> None:
        with self._lock:
            self._conn.close()
