"""Exception types raised by obstree."""


class ObservableError(Exception):
    """Base class for all obstree errors."""

    pass


class PrimitiveValueError(ObservableError, TypeError):
    """A primitive value was given where a dict or list is required."""

    pass


class InvalidKeyError(ObservableError, TypeError):
    """A mapping key that can not be part of a path (only str keys can)."""

    pass


class NotTrackedError(ObservableError):
    """An operation addressed a value that is not (or no longer) part of a tree."""

    pass


class NotificationDepthError(ObservableError, RecursionError):
    """Listener-triggered mutations nested deeper than the configured limit."""

    pass


class PersistenceError(ObservableError):
    """Stored data could not be loaded into a tree."""

    pass
