import pytest
from unittest.mock import AsyncMock

from synthetics.executor import EventType, Runner, get_runner
from synthetics.executor.browser import BrowserProvider

SCREENSHOT = b"\x89PNG fake screenshot"


def make_browser(screenshot: bytes = SCREENSHOT):
    """Browser double exposing new_context() -> new_page() -> page"""
    page = AsyncMock()
    page.screenshot = AsyncMock(return_value=screenshot)

    context = AsyncMock()
    context.new_page = AsyncMock(return_value=page)

    browser = AsyncMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.page = page
    browser.context = context
    return browser


class FakeProvider(BrowserProvider):
    """Records launched browsers instead of starting Playwright"""

    def __init__(self, launch_error: Exception = None):
        self.launch_error = launch_error
        self.browsers = []
        self.launch_calls = []
        self.stopped = 0

    async def launch(self, browser_type, options=None):
        self.launch_calls.append((browser_type, options))
        if self.launch_error is not None:
            raise self.launch_error
        browser = make_browser()
        self.browsers.append(browser)
        return browser

    async def stop(self):
        self.stopped += 1


class EventRecorder:
    """Subscribes to every event kind and keeps them in emission order"""

    def __init__(self, runner: Runner):
        self.events = []
        for event_type in EventType:
            runner.on(event_type, self.events.append)

    @property
    def kinds(self):
        return [event.type.value for event in self.events]

    def trace(self):
        trace = []
        for event in self.events:
            entry = event.type.value
            journey = getattr(event, 'journey', None)
            step = getattr(event, 'step', None)
            if journey is not None:
                entry += f" {journey.name}"
            if step is not None:
                entry += f"/{step.name}"
            trace.append(entry)
        return trace


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def runner(provider):
    return Runner(provider=provider)


@pytest.fixture
def recorder(runner):
    return EventRecorder(runner)


@pytest.fixture
def default_runner(provider):
    """The process-wide runner, with a fake provider and a clean registry"""
    target = get_runner()
    original_provider = target.provider
    target.provider = provider
    target.reset()
    yield target
    target.reset()
    target.provider = original_provider
