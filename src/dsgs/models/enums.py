"""String enums for constraints, task context capsules and envelopes."""

from enum import IntEnum, StrEnum


class ConstraintCategory(StrEnum):
    SECURITY = "SECURITY"
    PERFORMANCE = "PERFORMANCE"
    ARCHITECTURE = "ARCHITECTURE"
    OTHER = "OTHER"


class ConstraintSeverity(StrEnum):
    WARNING = "WARNING"
    ERROR = "ERROR"


class ViolationSeverity(StrEnum):
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"


class LoadLevel(StrEnum):
    LOW = "LOW"
    MED = "MED"
    HIGH = "HIGH"


class DeploymentEnvironment(StrEnum):
    DEVELOPMENT = "DEVELOPMENT"
    STAGING = "STAGING"
    PRODUCTION = "PRODUCTION"


class Priority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ErrorCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    SPECIFICATION_LOAD_FAILED = -32001
    TCC_LOAD_FAILED = -32002
    GENERATION_FAILED = -32003
