from typing import Any


class AppException(Exception):
    """Base application exception."""

    error_code: str = "APP_ERROR"
    message: str = "An application error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.error_code = error_code or self.__class__.error_code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(error_code={self.error_code!r}, message={self.message!r})"


class NotFoundError(AppException):
    """Resource not found."""

    error_code = "NOT_FOUND"
    message = "Resource not found"


class ValidationError(AppException):
    """Validation error."""

    error_code = "VALIDATION_ERROR"
    message = "Validation failed"


class ArtifactCreationError(AppException):
    """Payment processor rejected or could not create the artifact."""

    error_code = "ARTIFACT_CREATION_FAILED"
    message = "Payment processor could not create the payment artifact"


class ArtifactGatewayTimeoutError(ArtifactCreationError):
    """Payment processor did not answer in time."""

    error_code = "GATEWAY_TIMEOUT"
    message = "Payment processor timed out"


class PersistenceError(AppException):
    """Session store unreachable or write failed."""

    error_code = "PERSISTENCE_FAILURE"
    message = "Session store operation failed"


class PersistenceTimeoutError(PersistenceError):
    """Session store did not answer in time."""

    error_code = "STORE_TIMEOUT"
    message = "Session store timed out"


class UntrackedArtifactError(PersistenceError):
    """Artifact exists at the processor but no local session was recorded.

    Money can still move for this artifact, so this needs operator attention.
    """

    error_code = "UNTRACKED_ARTIFACT"
    message = "Payment artifact was created but could not be recorded"

    def __init__(
        self,
        artifact_id: str,
        message: str | None = None,
    ) -> None:
        self.artifact_id = artifact_id
        super().__init__(
            message=message or f"Payment artifact {artifact_id} was created but could not be recorded",
            details={"artifact_id": artifact_id},
        )


class SignatureInvalidError(AppException):
    """Webhook body was not signed with the shared secret."""

    error_code = "SIGNATURE_INVALID"
    message = "Invalid webhook signature"
