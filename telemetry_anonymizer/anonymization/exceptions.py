class AnonymizationError(Exception):
    """Base exception for all anonymization-related errors."""


class AnonymizationInputError(AnonymizationError):
    """Raised when a value cannot be anonymized as given."""


class EmptyValueError(AnonymizationInputError):
    """Raised when an empty or blank value is passed to pseudonym generation."""


class TraversalError(AnonymizationError):
    """Raised when walking an input structure fails unexpectedly."""


class ProcessingDeadlineExceeded(AnonymizationError):
    """Raised internally when a call runs past its processing budget."""
