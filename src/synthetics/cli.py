import asyncio
import json
import logging
import os
import sys
from pathlib import Path

import click

from . import __version__
from .core import ConfigManager, SyntheticsError, deep_merge
from .core.config import DEFAULT_ENVIRONMENT
from .executor import RunOptions, any_failed, get_runner
from .executor.browser import SUPPORTED_BROWSERS
from .executor.loader import load_inline_script, load_suites, preload_modules, prepare_suites
from .reporters import reporters

logger = logging.getLogger(__name__)

DEBUG_NAMESPACE = "synthetics"


def _setup_logging(debug: bool) -> None:
    # Reporters own stdout, so logging stays quiet unless debugging
    if os.getenv("DEBUG") == DEBUG_NAMESPACE:
        debug = True
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


def _parse_params(ctx, param, value):
    if not value:
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}")
    if not isinstance(parsed, dict):
        raise click.BadParameter("must be a JSON object")
    return parsed


def _read_stdin() -> str:
    with click.open_file('-') as stream:
        return stream.read()


@click.command()
@click.argument('files', nargs=-1, type=click.Path())
@click.option('--config', '-c', type=click.Path(exists=True, dir_okay=False), help='Configuration file path')
@click.option('--params', '-p', callback=_parse_params, help='JSON object of parameters passed to every journey')
@click.option('--pattern', help='Regex matched against files found in directories')
@click.option('--inline', is_flag=True, help='Run the journey script piped on stdin')
@click.option('--require', '-r', multiple=True, help='Module to import before loading journeys')
@click.option('--reporter', type=click.Choice(sorted(reporters)), default='default', show_default=True,
              help='Reporter used to render results')
@click.option('--browser', '-b', type=click.Choice(SUPPORTED_BROWSERS), default='chromium', show_default=True,
              help='Browser to use')
@click.option('--headless/--no-headless', default=None, help='Run the browser headless')
@click.option('--sandbox/--no-sandbox', default=None, help='Enable the Chromium sandbox')
@click.option('--ignore-https-errors', is_flag=True, help='Ignore HTTPS errors')
@click.option('--quiet-exit-code', is_flag=True, help='Always exit with status 0')
@click.option('--debug', '-d', is_flag=True, help='Enable debug logging')
@click.version_option(__version__, prog_name='synthetics')
def cli(files, config, params, pattern, inline, require, reporter, browser, headless, sandbox,
        ignore_https_errors, quiet_exit_code, debug):
    """Run synthetic browser journeys from FILES (or paths piped on stdin)"""
    _setup_logging(debug)

    try:
        if inline:
            load_inline_script(_read_stdin())
        else:
            preload_modules(require)
            inputs = list(files) or [line.strip() for line in _read_stdin().splitlines() if line.strip()]
            load_suites(prepare_suites(inputs, pattern=pattern))

        environment = os.getenv("SYNTHETICS_ENV") or DEFAULT_ENVIRONMENT
        if config or not inline:
            config_manager = ConfigManager(Path(config) if config else None, environment=environment)
            config_params = config_manager.params
            config_playwright = config_manager.playwright_options
            config_context = config_manager.context_options
        else:
            config_params, config_playwright, config_context = {}, {}, {}

        cli_playwright = {
            'headless': headless,
            'chromium_sandbox': sandbox,
        }
        playwright_options = deep_merge(
            config_playwright, {k: v for k, v in cli_playwright.items() if v is not None}
        )
        context_options = dict(config_context)
        if ignore_https_errors:
            context_options['ignore_https_errors'] = True

        options = RunOptions(
            params=deep_merge(config_params, params),
            browser_type=browser,
            reporter=reporter,
            environment=environment,
            playwright_options=playwright_options,
            context_options=context_options,
        )
        results = asyncio.run(get_runner().run(options))

    except SyntheticsError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        logger.debug("Run aborted", exc_info=True)
        click.echo(f"Error: {type(e).__name__}: {e}", err=True)
        raise SystemExit(1)

    # Exit with error status if any journey fails
    if not quiet_exit_code and any_failed(results):
        raise SystemExit(1)


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
