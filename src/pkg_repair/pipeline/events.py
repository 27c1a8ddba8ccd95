from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Union

from .types import Event, Stage

if TYPE_CHECKING:
    from .sequencer import RunOutcome


@dataclass(frozen=True, slots=True)
class StageStarted:
    stage: Stage
    position: int
    total: int


@dataclass(frozen=True, slots=True)
class StageFinished:
    event: Event
    position: int
    total: int


@dataclass(frozen=True, slots=True)
class RunFinished:
    outcome: "RunOutcome"


Message = Union[StageStarted, StageFinished, RunFinished]


class Consumer(Protocol):
    def handle(self, message: Message) -> None: ...


class EventBus:
    """
    One producer, any number of consumers.

    Every subscriber owns a FIFO queue. publish() appends the message to
    all queues and then drains them, so each consumer sees messages in
    publication order even if it publishes from inside handle().
    """

    def __init__(self) -> None:
        self._queues: list[tuple[Consumer, deque[Message]]] = []
        self._draining = False

    def subscribe(self, consumer: Consumer) -> None:
        self._queues.append((consumer, deque()))

    def publish(self, message: Message) -> None:
        for _, q in self._queues:
            q.append(message)
        if self._draining:
            return
        self._draining = True
        try:
            self._drain()
        finally:
            self._draining = False

    def _drain(self) -> None:
        pending = True
        while pending:
            pending = False
            for consumer, q in self._queues:
                while q:
                    consumer.handle(q.popleft())
                    pending = True
