from .models import Step, Journey, JourneySnapshot, SessionContext
from .registry import JourneyRegistry
from .events import (
    EventBus,
    EventType,
    Event,
    StartEvent,
    JourneyStartEvent,
    JourneyEndEvent,
    StepStartEvent,
    StepEndEvent,
    EndEvent,
)
from .results import ResultAggregator, JourneyResult, StepResult, any_failed
from .browser import BrowserProvider, PlaywrightProvider, BrowserSession
from .runner import Runner, RunOptions, freeze_params
from .dsl import journey, step, get_runner

__all__ = [
    'Step',
    'Journey',
    'JourneySnapshot',
    'SessionContext',
    'JourneyRegistry',
    'EventBus',
    'EventType',
    'Event',
    'StartEvent',
    'JourneyStartEvent',
    'JourneyEndEvent',
    'StepStartEvent',
    'StepEndEvent',
    'EndEvent',
    'ResultAggregator',
    'JourneyResult',
    'StepResult',
    'any_failed',
    'BrowserProvider',
    'PlaywrightProvider',
    'BrowserSession',
    'Runner',
    'RunOptions',
    'freeze_params',
    'journey',
    'step',
    'get_runner',
]

# Module metadata
__description__ = 'Journey execution engine - run ordered browser journeys with Playwright'
