import json
from datetime import datetime
from typing import Any, Dict

from .base import BaseReporter
from ..executor.events import (
    Event,
    StartEvent,
    JourneyStartEvent,
    JourneyEndEvent,
    StepStartEvent,
    StepEndEvent,
    EndEvent,
)
from ..executor.results import format_error
from ..executor.runner import thaw_params


class JSONReporter(BaseReporter):
    """Writes one JSON document per lifecycle event (newline delimited)"""

    def emit(self, event: Event, payload: Dict[str, Any]) -> None:
        record = {
            'type': event.type.value,
            '@timestamp': datetime.now().isoformat(),
            **payload,
        }
        self.write(json.dumps(record, default=str))

    def on_start(self, event: StartEvent) -> None:
        self.emit(event, {'num_journeys': event.num_journeys})

    def on_journey_start(self, event: JourneyStartEvent) -> None:
        self.emit(event, {
            'journey': {'name': event.journey.name},
            'params': thaw_params(event.params),
        })

    def on_journey_end(self, event: JourneyEndEvent) -> None:
        self.emit(event, {
            'journey': {'name': event.journey.name, 'status': 'failed' if event.error is not None else 'succeeded'},
            'params': thaw_params(event.params),
            'elapsed_ms': event.elapsed_ms,
            'error': format_error(event.error),
        })

    def on_step_start(self, event: StepStartEvent) -> None:
        self.emit(event, {
            'journey': {'name': event.journey.name},
            'step': {'name': event.step.name},
        })

    def on_step_end(self, event: StepEndEvent) -> None:
        self.emit(event, {
            'journey': {'name': event.journey.name},
            'step': {'name': event.step.name, 'status': 'failed' if event.error is not None else 'succeeded'},
            'elapsed_ms': event.elapsed_ms,
            'error': format_error(event.error),
            'screenshot': event.screenshot,
        })

    def on_end(self, event: EndEvent) -> None:
        self.emit(event, {})
