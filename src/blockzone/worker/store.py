"""Key-value storage for the worker.

Mirrors the shape of a hosted KV namespace: string values under string keys,
single-key get/put/delete and prefix listing. There are no multi-key
transactions; a read-modify-write sequence across calls is not atomic.
"""

from __future__ import annotations

import json
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional


class KVStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def list_keys(self, prefix: str = "") -> List[str]:
        ...

    def get_json(self, key: str) -> Any:
        raw = self.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def put_json(self, key: str, value: Any) -> None:
        self.put(key, json.dumps(value))


class MemoryKV(KVStore):
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def list_keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))


class JsonFileKV(MemoryKV):
    """MemoryKV persisted to a single JSON document after every write."""

    def __init__(self, path: str | os.PathLike) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            with open(self.path, "r", encoding="utf-8") as f:
                self._data = json.load(f)

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._data, f)
        os.replace(tmp, self.path)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
            self._flush()

    def delete(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self._flush()


@dataclass
class Namespaces:
    players: KVStore
    scores: KVStore
    sessions: KVStore

    @classmethod
    def in_memory(cls) -> "Namespaces":
        return cls(players=MemoryKV(), scores=MemoryKV(), sessions=MemoryKV())

    @classmethod
    def on_disk(cls, directory: str | os.PathLike) -> "Namespaces":
        base = Path(directory)
        return cls(
            players=JsonFileKV(base / "players.json"),
            scores=JsonFileKV(base / "scores.json"),
            sessions=JsonFileKV(base / "sessions.json"),
        )
