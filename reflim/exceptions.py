"""Project-wide exception and warning types."""


class ReflimError(Exception):
    """Base exception for all reference interval errors."""


class DataSourceError(ReflimError):
    """Raised when a sample cannot be loaded or a column is missing."""


class InsufficientDataError(DataSourceError):
    """Raised when data does not meet minimum sample requirements."""


class EmptyTruncationError(InsufficientDataError):
    """Raised when a truncation pass removes every value."""


class DomainError(ReflimError):
    """Raised when a value lies outside the domain of a transform (e.g. log of x <= 0)."""


class InvalidRangeError(ReflimError):
    """Raised when a lower limit is not strictly below its upper limit."""


class ConfigError(ReflimError):
    """Raised when configuration is missing or malformed."""


class ConfigValidationError(ConfigError):
    """Raised when validation fails for supplied configuration."""


class ReflimWarning(UserWarning):
    """Base category for non-fatal estimation conditions."""


class DegenerateSpreadWarning(ReflimWarning):
    """Emitted when a truncation pass sees a zero interquartile half-spread."""


class ConvergenceWarning(ReflimWarning):
    """Emitted when iterative truncation hits its iteration cap."""


class ConfidenceInstabilityWarning(ReflimWarning):
    """Emitted when confidence bounds around the limits are out of order."""
