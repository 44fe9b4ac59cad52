"""Typed in-process publish/subscribe used between the engine and its observers."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, DefaultDict, List, Type, TypeVar


@dataclass(frozen=True)
class PhaseChanged:
    previous: str
    current: str


@dataclass(frozen=True)
class PieceLocked:
    kind: int
    cells: int


@dataclass(frozen=True)
class LinesCleared:
    count: int
    score_delta: int
    total_lines: int
    level: int


@dataclass(frozen=True)
class GameOver:
    score: int
    lines: int
    level: int
    elapsed_s: int


E = TypeVar("E")
Handler = Callable[[E], None]


class EventBus:
    def __init__(self) -> None:
        self._handlers: DefaultDict[type, List[Callable]] = defaultdict(list)

    def on(self, event_type: Type[E], handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def off(self, event_type: Type[E], handler: Handler) -> None:
        self._handlers[event_type] = [h for h in self._handlers[event_type] if h is not handler]

    def emit(self, event: object) -> None:
        for handler in list(self._handlers[type(event)]):
            handler(event)
