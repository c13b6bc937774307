import sys
from typing import Optional, TextIO

from ..executor.events import (
    EventType,
    StartEvent,
    JourneyStartEvent,
    JourneyEndEvent,
    StepStartEvent,
    StepEndEvent,
    EndEvent,
)


class BaseReporter:
    """
    Base class for reporters.

    Subscribes to every lifecycle event on the runner's bus when created;
    subclasses override the ``on_*`` hooks they care about.
    """

    def __init__(self, runner, stream: Optional[TextIO] = None):
        self.runner = runner
        self.stream = stream or sys.stdout
        self._subscriptions = [
            (EventType.START, self.on_start),
            (EventType.JOURNEY_START, self.on_journey_start),
            (EventType.JOURNEY_END, self.on_journey_end),
            (EventType.STEP_START, self.on_step_start),
            (EventType.STEP_END, self.on_step_end),
            (EventType.END, self.on_end),
        ]
        for event_type, handler in self._subscriptions:
            runner.on(event_type, handler)

    def write(self, text: str = "") -> None:
        self.stream.write(text + "\n")

    def on_start(self, event: StartEvent) -> None:
        pass

    def on_journey_start(self, event: JourneyStartEvent) -> None:
        pass

    def on_journey_end(self, event: JourneyEndEvent) -> None:
        pass

    def on_step_start(self, event: StepStartEvent) -> None:
        pass

    def on_step_end(self, event: StepEndEvent) -> None:
        pass

    def on_end(self, event: EndEvent) -> None:
        pass

    def close(self) -> None:
        """Unsubscribe from the runner and flush output"""
        for event_type, handler in self._subscriptions:
            self.runner.off(event_type, handler)
        self.stream.flush()
