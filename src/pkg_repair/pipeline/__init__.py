from .events import EventBus, Message, RunFinished, StageFinished, StageStarted
from .report import EventReporter, render_report
from .sequencer import RunOutcome, RunState, Sequencer
from .stage import StageHandler
from .types import STAGE_ORDER, Event, Stage

__all__ = [
    "EventBus",
    "Message",
    "RunFinished",
    "StageFinished",
    "StageStarted",
    "EventReporter",
    "render_report",
    "RunOutcome",
    "RunState",
    "Sequencer",
    "StageHandler",
    "STAGE_ORDER",
    "Event",
    "Stage",
]
