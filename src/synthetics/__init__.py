"""
Synthetics - run ordered browser journeys and report what happened
"""

__version__ = "0.1.0"
__author__ = "Synthetics Contributors"

from typing import Dict

from .core import ConfigManager, SyntheticsError
from .executor import (
    Runner,
    RunOptions,
    JourneyResult,
    journey,
    step,
    get_runner,
    any_failed,
)


async def run(options: RunOptions) -> Dict[str, JourneyResult]:
    """Run every journey registered on the default runner"""
    return await get_runner().run(options)


__all__ = [
    "ConfigManager",
    "SyntheticsError",
    "Runner",
    "RunOptions",
    "JourneyResult",
    "journey",
    "step",
    "get_runner",
    "any_failed",
    "run",
]
