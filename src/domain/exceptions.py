"""Base exception classes for the task lifecycle engine domain layer."""


class TaskEngineError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    This enables consistent error handling across the application:
    batch operations catch TaskEngineError per task and keep going,
    while anything else propagates.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
