"""Fire-and-forget feedback cues (sounds, celebrations) for the front end."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class FeedbackCue(str, Enum):
    """Cues the core emits; what they sound or look like is up to the sink."""

    TASK_CREATED = "task-created"
    TASK_COMPLETED = "task-completed"
    TASK_DELETED = "task-deleted"
    UI_CLICK = "ui-click"


FeedbackSink = Callable[[FeedbackCue], None]


class FeedbackDispatcher:
    """Fans cues out to registered sinks.

    Sinks are called synchronously but their results are ignored, and an
    exception raised by a sink is logged and dropped so it can never fail
    the operation that emitted the cue.
    """

    def __init__(self, sinks: list[FeedbackSink] | None = None):
        self._sinks: list[FeedbackSink] = list(sinks or [])

    def add_sink(self, sink: FeedbackSink) -> None:
        self._sinks.append(sink)

    def remove_sink(self, sink: FeedbackSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def emit(self, cue: FeedbackCue) -> None:
        for sink in list(self._sinks):
            try:
                sink(cue)
            except Exception as e:  # pylint: disable=broad-exception-catch
                logger.warning("feedback sink failed on %s: %s", cue.value, e)
