"""Custom exception classes for DSGS.

Protocol-facing errors carry the numeric code that ends up in the response
envelope. Collaborator errors (specification service, TCC construction,
template parsing) carry no code; the dispatcher wraps them.
"""

from dsgs.models.enums import ErrorCode


class DSGSError(Exception):
    """Base exception for errors reported inside a response envelope."""

    def __init__(self, code: int, message: str):
        self.code = int(code)
        self.message = message
        super().__init__(message)


class ParseError(DSGSError):
    """Request body is not valid JSON."""

    def __init__(self, message: str = "Parse error"):
        super().__init__(ErrorCode.PARSE_ERROR, message)


class InvalidRequestError(DSGSError):
    """Disallowed transport verb or an envelope that is not an object."""

    def __init__(self, message: str = "Invalid Request"):
        super().__init__(ErrorCode.INVALID_REQUEST, message)


class MethodNotFoundError(DSGSError):
    """Method name is not in the dispatch table."""

    def __init__(self, method: str | None = None):
        super().__init__(ErrorCode.METHOD_NOT_FOUND, "Method not found")
        self.method = method


class InvalidParamsError(DSGSError):
    """Handler parameters are missing or malformed."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.INVALID_PARAMS, message)


class InternalError(DSGSError):
    """Unanticipated failure during dispatch."""

    def __init__(self, message: str = "Internal error"):
        super().__init__(ErrorCode.INTERNAL_ERROR, message)


class SpecificationLoadError(DSGSError):
    """The specification document named by a request could not be loaded."""

    def __init__(self, cause: Exception | str):
        super().__init__(ErrorCode.SPECIFICATION_LOAD_FAILED, f"Failed to load specification: {cause}")


class TCCLoadError(DSGSError):
    """The task context capsule named by a request could not be loaded."""

    def __init__(self, cause: Exception | str):
        super().__init__(ErrorCode.TCC_LOAD_FAILED, f"Failed to load task context capsule: {cause}")


class GenerationError(DSGSError):
    """Constraint generation failed."""

    def __init__(self, cause: Exception | str):
        super().__init__(ErrorCode.GENERATION_FAILED, f"Failed to generate constraints: {cause}")
        self.cause = cause


# --- Collaborator errors (no envelope code) ---


class LoadError(Exception):
    """A specification document could not be read, parsed or validated."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load specification from {path}: {reason}")


class SaveError(Exception):
    """A specification document could not be written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save specification to {path}: {reason}")


class SizeExceededError(Exception):
    """A task context capsule serializes to more bytes than allowed."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"TCC size exceeds limit: {size} bytes (limit {limit})")


class TemplateError(Exception):
    """A constraint template file is unreadable or malformed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid constraint template {path}: {reason}")
