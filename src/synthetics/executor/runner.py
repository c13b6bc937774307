import base64
import inspect
import logging
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, TextIO

from .browser import BrowserProvider, BrowserSession, PlaywrightProvider
from .events import (
    EventBus,
    EventKey,
    Event,
    Handler,
    StartEvent,
    JourneyStartEvent,
    JourneyEndEvent,
    StepStartEvent,
    StepEndEvent,
    EndEvent,
)
from .models import Journey, SessionContext, Step
from .registry import JourneyRegistry
from .results import JourneyResult, ResultAggregator

logger = logging.getLogger(__name__)


def freeze_params(value: Any) -> Any:
    """Return a read-only deep copy of ``value``"""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze_params(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_params(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze_params(v) for v in value)
    return value


def thaw_params(value: Any) -> Any:
    """Return a plain ``dict``/``list`` copy of frozen params"""
    if isinstance(value, Mapping):
        return {k: thaw_params(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw_params(v) for v in value]
    if isinstance(value, frozenset):
        return sorted((thaw_params(v) for v in value), key=repr)
    return value


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


@dataclass
class RunOptions:
    """Options for a single run"""
    params: Mapping[str, Any] = field(default_factory=dict)
    browser_type: str = "chromium"
    reporter: Optional[str] = None
    environment: str = "development"
    playwright_options: Dict[str, Any] = field(default_factory=dict)
    context_options: Dict[str, Any] = field(default_factory=dict)
    reporter_stream: Optional[TextIO] = None


class Runner:
    """
    Executes registered journeys one after another.

    Every journey gets its own browser, context and page. Steps within a
    journey run in registration order and stop at the first failure; a
    failing journey never prevents the following journeys from running.
    """

    def __init__(
            self,
            registry: Optional[JourneyRegistry] = None,
            provider: Optional[BrowserProvider] = None,
            bus: Optional[EventBus] = None
    ):
        self.registry = registry or JourneyRegistry()
        self.provider = provider or PlaywrightProvider()
        self.bus = bus or EventBus()

    @property
    def journeys(self):
        return self.registry.journeys

    @property
    def current_journey(self) -> Optional[Journey]:
        return self.registry.current_journey

    def add_journey(self, journey: Journey) -> Journey:
        return self.registry.add_journey(journey)

    def add_step(self, step: Step) -> Optional[Step]:
        return self.registry.add_step(step)

    def on(self, event_type: EventKey, handler: Handler) -> Handler:
        return self.bus.on(event_type, handler)

    def off(self, event_type: EventKey, handler: Handler) -> None:
        self.bus.off(event_type, handler)

    def emit(self, event: Event) -> None:
        self.bus.emit(event)

    def reset(self) -> None:
        self.registry.reset()

    def _install_reporter(self, options: RunOptions):
        if not options.reporter:
            return None
        # Imported here, reporters depend on the executor package
        from ..reporters import get_reporter

        reporter_cls = get_reporter(options.reporter)
        logger.debug(f"Installing reporter: {options.reporter}")
        return reporter_cls(self, stream=options.reporter_stream)

    async def run(self, options: Optional[RunOptions] = None) -> Dict[str, JourneyResult]:
        """
        Run every registered journey and return results keyed by journey name.

        The registry is cleared afterwards, so a second call without new
        registrations runs nothing.
        """
        options = options or RunOptions()
        params = freeze_params(options.params or {})
        journeys = list(self.registry.journeys)

        reporter = None
        aggregator = ResultAggregator()
        aggregator.attach(self.bus)

        try:
            reporter = self._install_reporter(options)
            self.emit(StartEvent(num_journeys=len(journeys)))
            for journey in journeys:
                await self._run_journey(journey, params, options)
            self.emit(EndEvent())
        finally:
            aggregator.detach(self.bus)
            if reporter is not None:
                reporter.close()
            self.reset()
            try:
                await self.provider.stop()
            except Exception as e:
                logger.error(f"Failed to stop browser provider: {e}")

        logger.info(
            f"Run finished: {len(aggregator.results)} journeys, "
            f"{sum(1 for r in aggregator.results.values() if r.failed)} failed"
        )
        return aggregator.results

    async def _run_journey(self, journey: Journey, params: Mapping[str, Any], options: RunOptions) -> None:
        """Run one journey in a fresh browser session; failures stay inside the journey"""
        logger.info(f"Starting journey: {journey.name}")
        journey_start = time.perf_counter()
        error: Optional[BaseException] = None

        try:
            session = await BrowserSession.acquire(
                self.provider, options.browser_type, options.playwright_options, options.context_options
            )
        except Exception as e:
            logger.error(f"Journey '{journey.name}' could not acquire a browser session: {e}")
            self.registry.current_journey = journey
            self.emit(JourneyStartEvent(journey=journey.snapshot(), params=params))
            self.emit(JourneyEndEvent(
                journey=journey.snapshot(),
                params=params,
                elapsed_ms=_elapsed_ms(journey_start),
                error=e,
            ))
            return

        try:
            journey_start = time.perf_counter()
            self.registry.current_journey = journey
            self.emit(JourneyStartEvent(journey=journey.snapshot(), params=params))

            error = await self._run_callback(journey, session, params)
            if error is None:
                error = await self._run_steps(journey, session, params)

            self.emit(JourneyEndEvent(
                journey=journey.snapshot(),
                params=params,
                elapsed_ms=_elapsed_ms(journey_start),
                error=error,
            ))
        finally:
            try:
                await session.close()
            except Exception as e:
                logger.error(f"Failed to close browser for journey '{journey.name}': {e}")

        if error is not None:
            logger.info(f"Journey '{journey.name}' failed: {error}")
        else:
            logger.info(f"Journey '{journey.name}' succeeded")

    async def _run_callback(
            self,
            journey: Journey,
            session: BrowserSession,
            params: Mapping[str, Any]
    ) -> Optional[BaseException]:
        """Invoke the journey's setup callback, which registers its steps"""
        if journey.callback is None:
            return None

        try:
            await _maybe_await(journey.callback(
                page=session.page,
                context=session.context,
                browser=session.browser,
                params=params,
            ))
        except Exception as e:
            logger.error(f"Journey '{journey.name}' callback failed: {e}")
            return e

        return None

    async def _run_steps(
            self,
            journey: Journey,
            session: BrowserSession,
            params: Mapping[str, Any]
    ) -> Optional[BaseException]:
        """
        Run steps in order, stopping at the first failure, which is returned.

        Steps registered by a running step are appended to the journey and run after it.
        """
        session_context = SessionContext(browser=session.browser, context=session.context)

        index = 0
        while index < len(journey.steps):
            step = journey.steps[index]
            index += 1
            snapshot = journey.snapshot()
            self.emit(StepStartEvent(journey=snapshot, step=step))
            step_start = time.perf_counter()
            error: Optional[BaseException] = None
            screenshot: Optional[str] = None

            try:
                await _maybe_await(step.action(session.page, params, session_context))
                await session.page.wait_for_load_state('load')
                screenshot = base64.b64encode(await session.page.screenshot()).decode('ascii')
            except Exception as e:
                logger.debug(f"Step '{step.name}' failed: {e}")
                error = e

            self.emit(StepEndEvent(
                journey=snapshot,
                step=step,
                elapsed_ms=_elapsed_ms(step_start),
                error=error,
                screenshot=screenshot,
            ))

            if error is not None:
                return error

        return None
