"""Base exception classes for the DocProof domain layer."""


class DocProofError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    This enables consistent error handling across the application.

    Every error describes where it happened and whether repeating the
    same call may succeed, so that callers can render an actionable
    message without inspecting the exception type.

    Attributes:
        layer: Which part of the system rejected the operation
            ("input", "ledger", "local_index").
        retry_safe: Whether the caller may retry the identical request.
        digest: Hex digest the error refers to, when there is one.
    """

    layer: str = "core"
    retry_safe: bool = False

    def __init__(self, message: str = "", digest: str | None = None) -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
            digest: Hex digest of the affected document, if any.
        """
        self.digest = digest
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        """Serialize the error for structured responses and logs."""
        return {
            "error": self.__class__.__name__,
            "message": str(self),
            "digest": self.digest,
            "layer": self.layer,
            "retry_safe": self.retry_safe,
        }
