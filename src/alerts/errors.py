class AlertError(Exception):
    """Base exception for alert collaborators."""


class AlertConfigurationError(AlertError):
    """Raised when alert output configuration is invalid."""


class AlertDeliveryError(AlertError):
    """Raised when an alert pulse or notification cannot be delivered."""
