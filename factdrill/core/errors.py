"""
Exceptions raised by the practice engine.
"""


class PracticeEngineError(Exception):
    """Base class for practice engine errors."""
    pass


class InvalidConfigurationError(PracticeEngineError, ValueError):
    """Raised when a session configuration cannot produce questions."""
    pass


class InvalidFactError(PracticeEngineError, ValueError):
    """Raised when a fact has an unknown operation or malformed operands."""
    pass


class InternalConsistencyError(PracticeEngineError):
    """Raised when the engine observes a fact it should never have built."""
    pass
