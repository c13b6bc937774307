import logging
from typing import Callable, List, Optional

from .models import Journey, Step

logger = logging.getLogger(__name__)


def _warn_orphan_step(step: Step) -> None:
    logger.warning(f"Step '{step.name}' registered outside of a journey, ignoring it")


class JourneyRegistry:
    """Ordered collection of journeys and the journey currently accepting steps"""

    def __init__(self, on_orphan_step: Optional[Callable[[Step], None]] = None):
        self.journeys: List[Journey] = []
        self.current_journey: Optional[Journey] = None
        self.on_orphan_step = on_orphan_step or _warn_orphan_step

    def add_journey(self, journey: Journey) -> Journey:
        """Append a journey and make it the target of subsequent steps"""
        if any(existing.name == journey.name for existing in self.journeys):
            logger.warning(f"Journey '{journey.name}' is already registered, results will be overwritten")

        self.journeys.append(journey)
        self.current_journey = journey
        logger.debug(f"Registered journey: {journey.name}")
        return journey

    def add_step(self, step: Step) -> Optional[Step]:
        """Append a step to the current journey; dropped when none is active"""
        if self.current_journey is None:
            self.on_orphan_step(step)
            return None

        self.current_journey.steps.append(step)
        logger.debug(f"Registered step: {self.current_journey.name} > {step.name}")
        return step

    def reset(self) -> None:
        """Clear all registered journeys"""
        self.journeys = []
        self.current_journey = None

    def __len__(self) -> int:
        return len(self.journeys)
