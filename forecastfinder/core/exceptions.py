"""Exception taxonomy for forecast model selection.

Only ConfigurationError ever reaches the caller. The per-entity and
per-candidate errors are raised inside the selection engine and recovered
there: the entity or candidate is logged and skipped.
"""

from typing import Any

# =============================================================================
# Exception Classes
# =============================================================================


class ForecastFinderError(Exception):
    """Base exception for ForecastFinder errors.

    All application-specific exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application error.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ConfigurationError(ForecastFinderError, ValueError):
    """Invalid call or pipeline configuration.

    Fatal and synchronous: raised before any entity is processed when a
    required parameter is missing or empty, a column is absent from the
    input schema, or the algorithm tag is unknown or incompatible with the
    entry point.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details=details,
        )


class InsufficientDataError(ForecastFinderError):
    """Entity series is too short to hold out a validation slice.

    Recovered per entity: the entity is excluded from the output.
    """

    def __init__(
        self,
        message: str = "Insufficient data",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="INSUFFICIENT_DATA",
            details=details,
        )


class FitFailureError(ForecastFinderError):
    """A single candidate failed to fit or predict.

    Recovered per candidate: the candidate is skipped.
    """

    def __init__(
        self,
        message: str = "Model fit failed",
        details: dict[str, Any] | None = None,
        code: str = "FIT_FAILURE",
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            details=details,
        )


class FitTimeoutError(FitFailureError):
    """A candidate fit exceeded the configured timeout."""

    def __init__(
        self,
        message: str = "Model fit timed out",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            details=details,
            code="FIT_TIMEOUT",
        )
