"""
Notifier exception hierarchy.

ConfigurationError is raised while a NotificationConfig is built, before
any build runs. NotifierError and its subclasses are raised inside the
publish pipeline and never escape it.
"""


class ConfigurationError(ValueError):
    """Raised when a notification configuration is invalid"""
    pass


class NotifierError(Exception):
    """Base class for errors raised while delivering a notification"""
    pass


class BrokerConnectionError(NotifierError):
    """Raised when the broker cannot be reached or refuses the connection"""
    pass


class PublishError(NotifierError):
    """Raised when the broker does not accept the published message"""
    pass
