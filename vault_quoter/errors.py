"""Error kinds raised by the decoder, the math library and the quoting engine."""

from enum import IntEnum


class ErrorKind(IntEnum):
    """Failure categories with stable numeric tags."""

    INVALID_MINT = 0
    INVALID_ACCOUNT_LAYOUT = 1
    MATH_OVERFLOW = 2
    DIVISION_BY_ZERO = 3
    RANGE_ERROR = 4
    UNSUPPORTED_OPERATION = 5
    ACCOUNT_NOT_FOUND = 6


# Reasons attached to INVALID_ACCOUNT_LAYOUT errors.
TRUNCATED_DATA = "TruncatedData"
MALFORMED_FIELD = "MalformedField"


class VaultError(ValueError):
    """Raised for any decode, arithmetic or quoting failure.

    A single exception type is used for every failure; callers dispatch on
    `kind` rather than on subclasses.
    """

    def __init__(self, kind: ErrorKind, message: str = "", *, reason: str | None = None) -> None:
        self.kind = kind
        self.reason = reason
        self.message = message or kind.name.replace("_", " ").title()
        super().__init__(self.message)

    def __str__(self) -> str:
        prefix = f"{self.kind.name}({int(self.kind)})"
        if self.reason:
            prefix = f"{prefix}/{self.reason}"
        return f"{prefix}: {self.message}"
