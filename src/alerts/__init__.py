"""Alert scheduling and delivery for session transitions.

`alerts.output` is imported explicitly by the entry point because it needs
a working PortAudio installation.
"""

from .contracts import (
    ALERT_ID_BREAK_SESSION_START,
    ALERT_ID_WORK_SESSION_END,
    AudioDeviceLike,
    NotificationServiceLike,
)
from .errors import AlertConfigurationError, AlertDeliveryError, AlertError
from .notifications import DeferredNotificationService, DeliveredAlert
from .scheduler import AlertScheduler

__all__ = [
    "ALERT_ID_BREAK_SESSION_START",
    "ALERT_ID_WORK_SESSION_END",
    "AlertConfigurationError",
    "AlertDeliveryError",
    "AlertError",
    "AlertScheduler",
    "AudioDeviceLike",
    "DeferredNotificationService",
    "DeliveredAlert",
    "NotificationServiceLike",
]
