"""Lifecycle events attached to HpaTuner objects.

Events are fire-and-forget: a sink logs its own failures and never raises
into the reconciliation that emitted them.
"""

from abc import ABC, abstractmethod

import kopf

from hpatuner.constants import EVENT_WARNING
from hpatuner.logger import TunerLogger

def render_message(message, fields):
    """Appends the structured context to a human message, in a stable order."""

    if not fields:
        return message
    context = ", ".join(f"{key}={value}" for key, value in fields.items())
    return f"{message} ({context})"

class EventSink(ABC):

    def __init__(self, logger: TunerLogger = None):
        self.logger = logger or TunerLogger("events")

    def emit(self, policy, event_type, reason, message, **fields):
        """Records one event for ``policy``; ``fields`` is the key-value context."""

        if event_type == EVENT_WARNING:
            self.logger.warning(message, reason=reason, policy=policy.key, **fields)
        else:
            self.logger.std_log(message, reason=reason, policy=policy.key, **fields)
        self.post(policy, event_type, reason, render_message(message, fields))

    @abstractmethod
    def post(self, policy, event_type, reason, message):
        pass

class LoggingEventSink(EventSink):
    """Only logs; used when no operator is running to post real events."""

    def post(self, policy, event_type, reason, message):
        pass

class KopfEventSink(EventSink):
    """Posts core/v1 Events through kopf's posting queue."""

    def post(self, policy, event_type, reason, message):
        try:
            kopf.event(policy.body, type=event_type, reason=reason, message=message)
        except Exception as e:  # posting is best-effort by contract
            self.logger.warning("Failed to post event", reason=reason, policy=policy.key, error=e)
