from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple


@dataclass(frozen=True)
class Step:
    """A named action performed against the journey's page"""
    name: str
    action: Callable[..., Any]


@dataclass(frozen=True)
class JourneySnapshot:
    """Immutable view of a journey, as carried by lifecycle events"""
    name: str
    steps: Tuple[Step, ...] = ()


@dataclass
class Journey:
    """
    A named, ordered sequence of steps.

    ``steps`` stays empty until the journey's callback registers them while the
    journey executes; registration order is execution order.
    """
    name: str
    callback: Optional[Callable[..., Any]] = None
    steps: List[Step] = field(default_factory=list)

    def snapshot(self) -> JourneySnapshot:
        return JourneySnapshot(name=self.name, steps=tuple(self.steps))


@dataclass(frozen=True)
class SessionContext:
    """Browser and context handles passed to every step action"""
    browser: Any
    context: Any
