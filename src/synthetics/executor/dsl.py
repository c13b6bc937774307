"""
Declarative registration API used by journey files.

    @journey("Login")
    def login(page, params, **_):
        @step("open home page")
        async def open_home(page, params, session):
            await page.goto(params["url"])

Both ``journey`` and ``step`` work as decorators or as plain calls, and
register against the process-wide default runner unless ``runner`` is given.
"""

from typing import Any, Callable, Optional

from .models import Journey, Step
from .runner import Runner

runner = Runner()


def get_runner() -> Runner:
    """Return the process-wide default runner"""
    return runner


def journey(name: str, callback: Optional[Callable[..., Any]] = None, runner: Optional[Runner] = None):
    """Register a journey whose callback registers its steps when it runs"""
    target = runner or get_runner()

    def decorator(func):
        target.add_journey(Journey(name=name, callback=func))
        return func

    if callback is not None:
        return decorator(callback)
    return decorator


def step(name: str, action: Optional[Callable[..., Any]] = None, runner: Optional[Runner] = None):
    """Register a step on the journey that is currently executing"""
    target = runner or get_runner()

    def decorator(func):
        target.add_step(Step(name=name, action=func))
        return func

    if action is not None:
        return decorator(action)
    return decorator
