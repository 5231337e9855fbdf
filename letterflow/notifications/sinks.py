from letterflow.logging.logger import Log
from letterflow.notifications.base import BaseNotificationSink
from letterflow.notifications.models import NotificationEvent, NotificationKind


class LogNotificationSink(BaseNotificationSink):
    """Writes events to the application log."""

    def emit(self, event: NotificationEvent) -> None:
        subject = event.submission_id or "-"
        if event.kind is NotificationKind.FAILURE:
            Log.warning(f"[notify] submission {subject}: {event.message}")
        else:
            Log.info(f"[notify] submission {subject}: {event.message}")


class InMemoryNotificationSink(BaseNotificationSink):
    """Collects events in order, for embedding callers that poll them."""

    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []

    def emit(self, event: NotificationEvent) -> None:
        self.events.append(event)

    def drain(self) -> list[NotificationEvent]:
        """Return collected events and forget them."""
        events, self.events = self.events, []
        return events
