"""In-app notifications for job events.

Models:
- Notification: One message for one recipient
- NotificationType: Kinds of job events users are told about

Delivery:
- NotificationSink / NotificationStore: Protocols for sinks and inboxes
- InMemoryNotificationStore: Inbox for tests and local development
- dispatch: Fire-and-forget delivery of a list of effects
"""

from resilinked.notifications.models import Notification, NotificationType
from resilinked.notifications.store import (
    InMemoryNotificationStore,
    NotificationSink,
    NotificationStore,
    dispatch,
)

__all__ = [
    "Notification",
    "NotificationType",
    "NotificationSink",
    "NotificationStore",
    "InMemoryNotificationStore",
    "dispatch",
]
