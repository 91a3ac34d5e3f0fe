"""
Exception types for the algorithm step engine.
"""


class AlgostepError(Exception):
    """Base class for engine errors."""
    pass


class InputValidationError(AlgostepError):
    """Raised when an algorithm rejects its input before running."""
    pass


class ProducerError(AlgostepError):
    """Raised when a producer breaks the algorithm contract."""
    pass


class UnknownAlgorithmError(AlgostepError):
    """Raised when no algorithm is registered under the requested id."""
    pass


class InvalidTransitionError(AlgostepError):
    """Raised when event handler is not registered or transition is invalid."""
    pass
