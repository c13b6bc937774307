import io
import json
import xml.etree.ElementTree as ET

import pytest

from synthetics.core.exceptions import ConfigurationError
from synthetics.executor import EventType, Journey, RunOptions, Runner, Step
from synthetics.reporters import (
    DefaultReporter,
    JSONReporter,
    JUnitReporter,
    get_reporter,
)


def ok(page, params, session):
    pass


def fail(page, params, session):
    raise AssertionError("title <mismatch>")


def register(runner, name, actions):
    def setup(**_):
        for step_name, action in actions:
            runner.add_step(Step(step_name, action))

    runner.add_journey(Journey(name=name, callback=setup))


@pytest.fixture
def stream():
    return io.StringIO()


class TestDefaultReporter:

    @pytest.mark.asyncio
    async def test_output(self, runner, stream):
        register(runner, "Login", [("open page", ok), ("check title", fail)])
        register(runner, "Search", [("search", ok)])
        reporter = DefaultReporter(runner, stream=stream)

        await runner.run(RunOptions())
        reporter.close()

        output = stream.getvalue()
        assert "Journey: Login" in output
        assert "Step: 'open page' succeeded" in output
        assert "Step: 'check title' failed" in output
        assert "AssertionError: title <mismatch>" in output
        assert "Journey: Search" in output
        assert "2 journeys: 1 succeeded, 1 failed" in output

    @pytest.mark.asyncio
    async def test_session_error_is_printed(self, stream):
        from conftest import FakeProvider

        runner = Runner(provider=FakeProvider(launch_error=RuntimeError("no browser")))
        register(runner, "Login", [("open page", ok)])
        DefaultReporter(runner, stream=stream)

        await runner.run(RunOptions())

        assert "no browser" in stream.getvalue()


class TestJSONReporter:

    @pytest.mark.asyncio
    async def test_one_line_per_event(self, runner, stream):
        register(runner, "Login", [("open page", ok)])
        JSONReporter(runner, stream=stream)

        await runner.run(RunOptions(params={"url": "https://example.com", "tags": ["smoke"]}))

        records = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert [r["type"] for r in records] == [
            "start", "journey:start", "step:start", "step:end", "journey:end", "end",
        ]
        assert records[0]["num_journeys"] == 1
        assert records[1]["params"] == {"url": "https://example.com", "tags": ["smoke"]}
        assert records[3]["step"] == {"name": "open page", "status": "succeeded"}
        assert records[3]["screenshot"]
        assert records[4]["journey"]["status"] == "succeeded"
        assert records[4]["error"] is None

    @pytest.mark.asyncio
    async def test_failure_fields(self, runner, stream):
        register(runner, "Login", [("check", fail)])
        JSONReporter(runner, stream=stream)

        await runner.run(RunOptions())

        records = [json.loads(line) for line in stream.getvalue().splitlines()]
        step_end = records[3]
        assert step_end["step"]["status"] == "failed"
        assert step_end["error"] == "AssertionError: title <mismatch>"
        assert step_end["screenshot"] is None


class TestJUnitReporter:

    @pytest.mark.asyncio
    async def test_xml(self, runner, stream):
        register(runner, "Login flow", [("open page", ok), ("check title", fail)])
        JUnitReporter(runner, stream=stream)

        await runner.run(RunOptions())

        root = ET.fromstring(stream.getvalue())
        assert root.tag == "testsuites"
        assert root.get("tests") == "2"
        assert root.get("failures") == "1"

        suite = root.find("testsuite")
        assert suite.get("name") == "Login flow"
        cases = suite.findall("testcase")
        assert [c.get("name") for c in cases] == ["open page", "check title"]
        assert cases[0].find("failure") is None
        assert cases[1].find("failure").get("message") == "AssertionError: title <mismatch>"
        assert cases[1].get("classname") == "Login_flow"


class TestReporterRegistry:

    def test_get_reporter(self):
        assert get_reporter("default") is DefaultReporter
        assert get_reporter("json") is JSONReporter
        assert get_reporter("junit") is JUnitReporter

    def test_unknown_reporter(self):
        with pytest.raises(ConfigurationError):
            get_reporter("html")

    def test_close_unsubscribes(self, runner, stream):
        reporter = DefaultReporter(runner, stream=stream)
        assert runner.bus.handlers(EventType.END) == [reporter.on_end]

        reporter.close()

        assert runner.bus.handlers(EventType.END) == []
