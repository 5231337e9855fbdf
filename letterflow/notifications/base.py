from abc import ABC, abstractmethod

from letterflow.notifications.models import NotificationEvent


class BaseNotificationSink(ABC):
    """Fire-and-forget receiver of workflow events.

    Callers do not depend on delivery; implementations may drop events.
    """

    @abstractmethod
    def emit(self, event: NotificationEvent) -> None:
        """Deliver one event."""
