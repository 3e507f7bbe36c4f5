class StrataError(Exception):
    """Base exception for the strata package."""


class ConfigError(StrataError, ValueError):
    """Raised when settings are missing, malformed or out of range."""


class GenerationError(StrataError, ValueError):
    """Raised when a generator is called with arguments it cannot honour."""


class TransitionError(StrataError):
    """Raised when a layer transition is requested from the wrong layer."""
