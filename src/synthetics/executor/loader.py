import hashlib
import importlib
import importlib.util
import logging
import os
import re
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..core.exceptions import LoaderError
from .dsl import journey, step
from .runner import Runner

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = r'.+\.journey\.py$'

# Directory names never searched for journey files
IGNORED_DIRS = {'__pycache__', 'site-packages', 'node_modules', '.git', '.venv', 'venv', '.tox'}


def prepare_suites(
        inputs: Iterable[Union[str, Path]],
        pattern: Optional[str] = None,
        cwd: Optional[Path] = None
) -> List[Path]:
    """
    Resolve input paths to the journey files to load.

    Directories are searched recursively for files whose relative path
    matches ``pattern`` (case-insensitive); files are used as given.

    Returns:
        Absolute paths, in input order, without duplicates
    """
    cwd = Path(cwd) if cwd else Path.cwd()
    regex = re.compile(pattern or DEFAULT_PATTERN, re.IGNORECASE)
    suites: List[Path] = []

    def add_suite(path: Path):
        if path not in suites:
            logger.debug(f"Processing file: {path}")
            suites.append(path)

    for raw in inputs:
        abs_path = (cwd / Path(raw)).resolve()

        if not abs_path.exists():
            raise LoaderError(f"Journey path not found: {abs_path}")

        if abs_path.is_dir():
            for root, dirs, files in os.walk(abs_path):
                dirs[:] = sorted(d for d in dirs if d not in IGNORED_DIRS)
                for filename in sorted(files):
                    full = Path(root) / filename
                    rel = full.relative_to(abs_path).as_posix()
                    if regex.search(rel):
                        add_suite(full)
        else:
            add_suite(abs_path)

    return suites


def load_suites(paths: Iterable[Path]) -> None:
    """Import each journey file so it registers its journeys"""
    for path in paths:
        path = Path(path)
        digest = hashlib.sha1(str(path).encode()).hexdigest()[:12]
        module_name = f"synthetics_suite_{digest}"

        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise LoaderError(f"Cannot load journey file: {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(module_name, None)
            raise
        logger.info(f"Loaded journey file: {path}")


def preload_modules(names: Iterable[str]) -> None:
    """Import modules required before journey files are loaded"""
    for name in filter(None, names):
        try:
            found = importlib.util.find_spec(name)
        except ModuleNotFoundError:
            found = None
        if found is None:
            raise LoaderError(f"cannot find module '{name}'")
        importlib.import_module(name)
        logger.debug(f"Preloaded module: {name}")


def load_inline_script(source: str, runner: Optional[Runner] = None) -> None:
    """
    Register a journey named ``inline`` that executes ``source``.

    The source runs when the journey does, with ``step``, ``page``,
    ``context``, ``browser`` and ``params`` in scope.
    """
    code = compile(source, '<inline>', 'exec')

    def register_step(name, action=None):
        return step(name, action, runner=runner)

    def inline_journey(page, context, browser, params):
        namespace = {
            'step': register_step,
            'page': page,
            'context': context,
            'browser': browser,
            'params': params,
        }
        exec(code, namespace)

    journey('inline', inline_journey, runner=runner)
