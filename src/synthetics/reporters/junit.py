from datetime import datetime
from typing import Any, Dict, List

from jinja2 import Template

from .base import BaseReporter
from ..executor.events import JourneyStartEvent, JourneyEndEvent, StepEndEvent, EndEvent
from ..executor.results import format_error

JUNIT_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<testsuites name="Synthetics Journeys" time="{{ '%.3f' % duration }}" tests="{{ total_tests }}" failures="{{ failures }}">
    {% for journey in journeys %}
    <testsuite name="{{ journey.name }}" tests="{{ journey.steps|length }}" failures="{{ journey.failures }}" time="{{ '%.3f' % journey.duration }}" timestamp="{{ journey.timestamp }}">
        {% for step in journey.steps %}
        <testcase classname="{{ journey.name|replace(' ', '_') }}" name="{{ step.name }}" time="{{ '%.3f' % step.duration }}">
            {% if step.error %}
            <failure message="{{ step.error }}">{{ step.error }}</failure>
            {% endif %}
        </testcase>
        {% endfor %}
        {% if journey.error and not journey.failures %}
        <testcase classname="{{ journey.name|replace(' ', '_') }}" name="journey setup" time="0">
            <error message="{{ journey.error }}">{{ journey.error }}</error>
        </testcase>
        {% endif %}
    </testsuite>
    {% endfor %}
</testsuites>
"""


class JUnitReporter(BaseReporter):
    """Renders a JUnit XML document once the run ends; each step is a test case"""

    def __init__(self, runner, stream=None):
        super().__init__(runner, stream)
        self.journeys: List[Dict[str, Any]] = []

    def on_journey_start(self, event: JourneyStartEvent) -> None:
        self.journeys.append({
            'name': event.journey.name,
            'timestamp': datetime.now().isoformat(),
            'steps': [],
            'failures': 0,
            'duration': 0.0,
            'error': None,
        })

    def on_step_end(self, event: StepEndEvent) -> None:
        journey = self.journeys[-1]
        error = format_error(event.error)
        journey['steps'].append({
            'name': event.step.name,
            'duration': event.elapsed_ms / 1000,
            'error': error,
        })
        if error:
            journey['failures'] += 1

    def on_journey_end(self, event: JourneyEndEvent) -> None:
        journey = self.journeys[-1]
        journey['duration'] = event.elapsed_ms / 1000
        journey['error'] = format_error(event.error)

    def on_end(self, event: EndEvent) -> None:
        template = Template(JUNIT_TEMPLATE, autoescape=True)
        self.stream.write(template.render(
            duration=sum(j['duration'] for j in self.journeys),
            total_tests=sum(len(j['steps']) for j in self.journeys),
            failures=sum(j['failures'] for j in self.journeys),
            journeys=self.journeys,
        ))
