from typing import Dict, Type

from ..core.exceptions import ConfigurationError
from .base import BaseReporter
from .default import DefaultReporter
from .json_reporter import JSONReporter
from .junit import JUnitReporter

reporters: Dict[str, Type[BaseReporter]] = {
    'default': DefaultReporter,
    'json': JSONReporter,
    'junit': JUnitReporter,
}


def get_reporter(name: str) -> Type[BaseReporter]:
    """Look up a reporter class by name"""
    if name not in reporters:
        raise ConfigurationError(
            f"Unknown reporter '{name}', expected one of: {', '.join(reporters)}"
        )
    return reporters[name]


__all__ = [
    'BaseReporter',
    'DefaultReporter',
    'JSONReporter',
    'JUnitReporter',
    'reporters',
    'get_reporter',
]
