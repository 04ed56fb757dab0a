class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class UnknownInputKindError(ProcessorError, ValueError):
    """Raised when no processor exists for the requested input kind."""
