import click

from .base import BaseReporter
from ..executor.events import JourneyStartEvent, JourneyEndEvent, StepEndEvent, EndEvent
from ..executor.results import format_error


def _duration(elapsed_ms: float) -> str:
    return f"{elapsed_ms:.0f} ms"


class DefaultReporter(BaseReporter):
    """Human readable console output"""

    def __init__(self, runner, stream=None):
        super().__init__(runner, stream)
        self.succeeded = 0
        self.failed = 0
        self._step_failed = False

    def write(self, text: str = "") -> None:
        click.echo(text, file=self.stream)

    def on_journey_start(self, event: JourneyStartEvent) -> None:
        self._step_failed = False
        self.write(f"\nJourney: {event.journey.name}")

    def on_step_end(self, event: StepEndEvent) -> None:
        if event.error is None:
            mark = click.style("✓", fg="green")
            self.write(f"  {mark}  Step: '{event.step.name}' succeeded ({_duration(event.elapsed_ms)})")
        else:
            self._step_failed = True
            mark = click.style("✖", fg="red")
            self.write(f"  {mark}  Step: '{event.step.name}' failed ({_duration(event.elapsed_ms)})")
            self.write(click.style(f"     {format_error(event.error)}", fg="red"))

    def on_journey_end(self, event: JourneyEndEvent) -> None:
        if event.error is None:
            self.succeeded += 1
            return

        self.failed += 1
        # Session and callback errors have no step line of their own
        if not self._step_failed:
            self.write(click.style(f"  ✖  {format_error(event.error)}", fg="red"))

    def on_end(self, event: EndEvent) -> None:
        total = self.succeeded + self.failed
        summary = f"\n{total} journeys: {self.succeeded} succeeded, {self.failed} failed"
        self.write(click.style(summary, fg="red" if self.failed else "green", bold=True))
