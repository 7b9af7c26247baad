"""Progress events published while a scenario runs.

Each ``ScenarioFlow`` owns one ``EventBus``. Listeners are plain callables
(sync or async) registered for that run only, so two runs in one process
never see each other's events. The bus also keeps the run's event history.
"""

import inspect
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from dpcheck.utils.logging import get_logger

logger = get_logger("events")


class EventType(str, Enum):
    FLOW_STARTED = "flow_started"
    STEP_STARTED = "step_started"
    STEP_COMPLETED = "step_completed"
    STEP_FAILED = "step_failed"
    FLOW_COMPLETED = "flow_completed"
    FLOW_FAILED = "flow_failed"


@dataclass(frozen=True)
class FlowEvent:
    type: EventType
    run_id: str
    scenario: str
    ts: float = field(default_factory=time.time)
    steps: Tuple[str, ...] = ()
    step: Optional[str] = None
    index: Optional[int] = None
    duration: Optional[float] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.type in (EventType.FLOW_COMPLETED, EventType.FLOW_FAILED)


Listener = Callable[[FlowEvent], Union[None, Awaitable[None]]]


class EventBus:
    """Delivers one run's events to its listeners, in publish order."""

    def __init__(self, run_id: str, scenario: str):
        self.run_id = run_id
        self.scenario = scenario
        self.history: List[FlowEvent] = []
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def of_type(self, event_type: EventType) -> List[FlowEvent]:
        return [event for event in self.history if event.type == event_type]

    async def publish(self, event_type: EventType, **details) -> FlowEvent:
        """Record the event and hand it to every listener before returning.

        A failing listener is logged and skipped; progress reporting never
        changes the outcome of the run.
        """
        event = FlowEvent(
            type=EventType(event_type), run_id=self.run_id, scenario=self.scenario, **details
        )
        self.history.append(event)
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"⚠️ Event listener failed on {event.type.value}: {e}")
        return event
