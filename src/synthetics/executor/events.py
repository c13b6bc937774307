"""
Lifecycle events emitted by the runner and the bus that delivers them.

Each event kind has exactly one payload class. Payloads are frozen and carry
journey snapshots, so subscribers cannot reach back into the running journey.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Type, Union

from .models import JourneySnapshot, Step

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Lifecycle event kinds"""
    START = "start"
    JOURNEY_START = "journey:start"
    JOURNEY_END = "journey:end"
    STEP_START = "step:start"
    STEP_END = "step:end"
    END = "end"


@dataclass(frozen=True)
class Event:
    type: ClassVar[EventType]


@dataclass(frozen=True)
class StartEvent(Event):
    type: ClassVar[EventType] = EventType.START
    num_journeys: int


@dataclass(frozen=True)
class JourneyStartEvent(Event):
    type: ClassVar[EventType] = EventType.JOURNEY_START
    journey: JourneySnapshot
    params: Mapping[str, Any]


@dataclass(frozen=True)
class JourneyEndEvent(Event):
    type: ClassVar[EventType] = EventType.JOURNEY_END
    journey: JourneySnapshot
    params: Mapping[str, Any]
    elapsed_ms: float
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class StepStartEvent(Event):
    type: ClassVar[EventType] = EventType.STEP_START
    journey: JourneySnapshot
    step: Step


@dataclass(frozen=True)
class StepEndEvent(Event):
    type: ClassVar[EventType] = EventType.STEP_END
    journey: JourneySnapshot
    step: Step
    elapsed_ms: float
    error: Optional[BaseException] = None
    screenshot: Optional[str] = None


@dataclass(frozen=True)
class EndEvent(Event):
    type: ClassVar[EventType] = EventType.END


EVENT_CLASSES: Dict[EventType, Type[Event]] = {
    cls.type: cls
    for cls in (StartEvent, JourneyStartEvent, JourneyEndEvent, StepStartEvent, StepEndEvent, EndEvent)
}

EventKey = Union[EventType, str, Type[Event]]
Handler = Callable[[Any], None]


def resolve_event_type(key: EventKey) -> EventType:
    """Normalize an event type, its string name or its payload class"""
    if isinstance(key, EventType):
        return key
    if isinstance(key, str):
        try:
            return EventType(key)
        except ValueError:
            raise ValueError(f"Unknown event type: {key}") from None
    if isinstance(key, type) and key in EVENT_CLASSES.values():
        return key.type
    raise ValueError(f"Unknown event type: {key!r}")


class EventBus:
    """Synchronous publish/subscribe channel for lifecycle events"""

    def __init__(self):
        self._handlers: Dict[EventType, List[Handler]] = {event_type: [] for event_type in EventType}

    def on(self, event_type: EventKey, handler: Handler) -> Handler:
        """Subscribe ``handler``; returns it so ``on`` can be used as a decorator target"""
        self._handlers[resolve_event_type(event_type)].append(handler)
        return handler

    def off(self, event_type: EventKey, handler: Handler) -> None:
        """Remove a previously subscribed handler; unknown handlers are ignored"""
        handlers = self._handlers[resolve_event_type(event_type)]
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: Event) -> None:
        """
        Deliver ``event`` to its subscribers in subscription order.

        Handler exceptions are not caught and propagate to the caller.
        """
        if not isinstance(event, Event) or type(event) not in EVENT_CLASSES.values():
            raise TypeError(f"Not a lifecycle event: {event!r}")

        # Copy so handlers may unsubscribe while being dispatched
        for handler in list(self._handlers[event.type]):
            handler(event)

    def handlers(self, event_type: EventKey) -> List[Handler]:
        return list(self._handlers[resolve_event_type(event_type)])
