import json
import textwrap
import warnings

import pytest
import yaml
from click.testing import CliRunner

from synthetics.cli import cli

PASSING = textwrap.dedent('''
    from synthetics import journey, step


    @journey("passing")
    def setup(page, params, **_):
        @step("visit")
        def visit(page, params, session):
            assert params["url"] == "https://example.com"
''')

FAILING = textwrap.dedent('''
    from synthetics import journey, step


    @journey("failing")
    def setup(page, params, **_):
        @step("explode")
        def explode(page, params, session):
            raise RuntimeError("kaboom")
''')


@pytest.fixture
def cli_runner(default_runner, monkeypatch, tmp_path):
    monkeypatch.delenv("SYNTHETICS_CONFIG", raising=False)
    monkeypatch.delenv("SYNTHETICS_ENV", raising=False)
    monkeypatch.chdir(tmp_path)
    return CliRunner()


class TestCli:

    def test_passing_journey(self, cli_runner, provider, tmp_path):
        (tmp_path / "ok.journey.py").write_text(PASSING)

        result = cli_runner.invoke(cli, [str(tmp_path), "--params", '{"url": "https://example.com"}'])

        assert result.exit_code == 0, result.output
        assert "Journey: passing" in result.output
        assert "1 journeys: 1 succeeded, 0 failed" in result.output
        assert provider.launch_calls[0][0] == "chromium"

    def test_failing_journey_sets_exit_code(self, cli_runner, tmp_path):
        (tmp_path / "bad.journey.py").write_text(FAILING)

        result = cli_runner.invoke(cli, [str(tmp_path)])

        assert result.exit_code == 1
        assert "RuntimeError: kaboom" in result.output

    def test_quiet_exit_code(self, cli_runner, tmp_path):
        (tmp_path / "bad.journey.py").write_text(FAILING)

        result = cli_runner.invoke(cli, [str(tmp_path), "--quiet-exit-code"])

        assert result.exit_code == 0

    def test_config_and_cli_options_are_merged(self, cli_runner, provider, tmp_path):
        (tmp_path / "ok.journey.py").write_text(PASSING)
        (tmp_path / "synthetics.config.yaml").write_text(yaml.dump({
            "params": {"url": "https://example.com", "user": "bot"},
            "playwright_options": {"headless": False, "slow_mo": 100},
        }))

        result = cli_runner.invoke(cli, [
            "ok.journey.py", "--headless", "--browser", "firefox", "--ignore-https-errors",
        ])

        assert result.exit_code == 0, result.output
        assert provider.launch_calls == [("firefox", {"headless": True, "slow_mo": 100})]
        provider.browsers[0].new_context.assert_awaited_once_with(ignore_https_errors=True)

    def test_json_reporter(self, cli_runner, tmp_path):
        (tmp_path / "ok.journey.py").write_text(PASSING)

        result = cli_runner.invoke(cli, [
            "ok.journey.py", "--reporter", "json", "--params", '{"url": "https://example.com"}',
        ])

        records = [json.loads(line) for line in result.output.splitlines()]
        assert records[0] == {**records[0], "type": "start", "num_journeys": 1}
        assert records[-1]["type"] == "end"

    def test_files_from_stdin(self, cli_runner, tmp_path):
        (tmp_path / "bad.journey.py").write_text(FAILING)

        result = cli_runner.invoke(cli, [], input="bad.journey.py\n")

        assert result.exit_code == 1
        assert "Journey: failing" in result.output

    def test_inline_script(self, cli_runner):
        source = 'step("inline step", lambda page, params, session: None)\n'

        result = cli_runner.invoke(cli, ["--inline"], input=source)

        assert result.exit_code == 0, result.output
        assert "Journey: inline" in result.output
        assert "Step: 'inline step' succeeded" in result.output

    def test_stdin_is_read_without_deprecation_warnings(self, cli_runner):
        source = 'step("inline step", lambda page, params, session: None)\n'

        with warnings.catch_warnings():
            warnings.filterwarnings("error", message=".*[Cc]lick", category=DeprecationWarning)
            result = cli_runner.invoke(cli, ["--inline"], input=source)

        assert result.exit_code == 0, result.output

    def test_invalid_params(self, cli_runner):
        result = cli_runner.invoke(cli, ["--params", "not json"])

        assert result.exit_code == 2

    def test_missing_path_reports_error(self, cli_runner):
        result = cli_runner.invoke(cli, ["missing.journey.py"])

        assert result.exit_code == 1
        assert "Journey path not found" in result.output

    def test_missing_required_module(self, cli_runner, tmp_path):
        (tmp_path / "ok.journey.py").write_text(PASSING)

        result = cli_runner.invoke(cli, ["ok.journey.py", "--require", "no_such_module_xyz"])

        assert result.exit_code == 1
        assert "cannot find module" in result.output
