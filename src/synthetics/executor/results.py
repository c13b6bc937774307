import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from .events import EventBus, EventType, JourneyEndEvent, JourneyStartEvent, StepEndEvent

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"
FAILED = "failed"


def format_error(error: Optional[BaseException]) -> Optional[str]:
    """Render an exception as ``Type: message``"""
    if error is None:
        return None
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__


@dataclass
class StepResult:
    """Outcome of a single step"""
    name: str
    status: str
    elapsed_ms: float = 0.0
    error: Optional[BaseException] = None
    screenshot: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'status': self.status,
            'elapsed_ms': self.elapsed_ms,
            'error': format_error(self.error),
            'screenshot': self.screenshot,
            'start_time': self.start_time,
            'end_time': self.end_time,
        }


@dataclass
class JourneyResult:
    """Outcome of a journey and its steps, in execution order"""
    name: str
    status: str
    error: Optional[BaseException] = None
    elapsed_ms: float = 0.0
    steps: List[StepResult] = field(default_factory=list)
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status == FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'status': self.status,
            'error': format_error(self.error),
            'elapsed_ms': self.elapsed_ms,
            'steps': [step.to_dict() for step in self.steps],
            'start_time': self.start_time,
            'end_time': self.end_time,
        }


def any_failed(results: Mapping[str, JourneyResult]) -> bool:
    """True when at least one journey failed"""
    return any(result.failed for result in results.values())


class ResultAggregator:
    """Builds the per-journey result map from lifecycle events"""

    def __init__(self):
        self.results: Dict[str, JourneyResult] = {}
        self._pending: Dict[str, JourneyResult] = {}

    def attach(self, bus: EventBus) -> None:
        bus.on(EventType.JOURNEY_START, self.on_journey_start)
        bus.on(EventType.STEP_END, self.on_step_end)
        bus.on(EventType.JOURNEY_END, self.on_journey_end)

    def detach(self, bus: EventBus) -> None:
        bus.off(EventType.JOURNEY_START, self.on_journey_start)
        bus.off(EventType.STEP_END, self.on_step_end)
        bus.off(EventType.JOURNEY_END, self.on_journey_end)

    def _pending_for(self, name: str) -> JourneyResult:
        if name not in self._pending:
            self._pending[name] = JourneyResult(name=name, status=SUCCEEDED)
        return self._pending[name]

    def on_journey_start(self, event: JourneyStartEvent) -> None:
        self._pending[event.journey.name] = JourneyResult(
            name=event.journey.name,
            status=SUCCEEDED,
            start_time=datetime.now().isoformat(),
        )

    def on_step_end(self, event: StepEndEvent) -> None:
        end = datetime.now()
        self._pending_for(event.journey.name).steps.append(StepResult(
            name=event.step.name,
            status=FAILED if event.error is not None else SUCCEEDED,
            elapsed_ms=event.elapsed_ms,
            error=event.error,
            screenshot=event.screenshot,
            start_time=(end - timedelta(milliseconds=event.elapsed_ms)).isoformat(),
            end_time=end.isoformat(),
        ))

    def on_journey_end(self, event: JourneyEndEvent) -> None:
        result = self._pending.pop(event.journey.name, None) or JourneyResult(
            name=event.journey.name, status=SUCCEEDED
        )
        step_error = next((step.error for step in result.steps if step.error is not None), None)
        result.error = event.error if event.error is not None else step_error
        result.status = FAILED if result.error is not None else SUCCEEDED
        result.elapsed_ms = event.elapsed_ms
        result.end_time = datetime.now().isoformat()

        if event.journey.name in self.results:
            logger.warning(f"Overwriting result of duplicate journey '{event.journey.name}'")
        self.results[event.journey.name] = result

    def has_failures(self) -> bool:
        return any_failed(self.results)

    def reset(self) -> None:
        self.results = {}
        self._pending = {}
