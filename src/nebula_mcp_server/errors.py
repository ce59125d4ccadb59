"""Error taxonomy for the NebulaGraph access layer.

Every recoverable failure raised by this package derives from
``NebulaToolboxError``. ``ContractViolation`` deliberately does not: it marks a
defect in caller-supplied schema definitions or a broken protocol assumption,
and is expected to take the process down rather than be handled.
"""

from __future__ import annotations

from typing import Any, List, Optional


class NebulaToolboxError(Exception):
    """Base class for all recoverable errors raised by this package."""


class ConfigError(NebulaToolboxError):
    """Missing or invalid connection parameters."""


class GraphConnectionError(NebulaToolboxError, ConnectionError):
    """Connection pool could not be initialized or a session could not be acquired."""


class StatementError(NebulaToolboxError):
    """The engine answered a statement with a non-success response."""

    def __init__(self, code: Any, message: str, statement: str = "") -> None:
        self.code = code
        self.message = message
        self.statement = statement
        super().__init__(
            f"nGQL executing failed. ErrorCode: {code}. ErrorMsg: {message}"
        )


class BatchExecutionError(NebulaToolboxError):
    """A statement in a batch failed; earlier statements were already applied.

    ``error`` is either the engine's ``StatementError`` or the
    ``GraphConnectionError`` raised when the session itself broke. ``code``
    is None for the latter.
    """

    def __init__(
        self,
        *,
        index: int,
        results: List[Any],
        error: NebulaToolboxError,
        statement: str = "",
    ) -> None:
        self.index = index
        self.results = results
        self.error = error
        self.code: Any = getattr(error, "code", None)
        self.message: str = getattr(error, "message", str(error))
        self.statement = statement or getattr(error, "statement", "")
        super().__init__(str(error))

    def __str__(self) -> str:
        return (
            f"Batch stopped at statement #{self.index} after "
            f"{len(self.results)} completed. {self.error}"
        )


class TypeMismatch(NebulaToolboxError, TypeError):
    """A value cannot be encoded as the declared field type."""


class UnsupportedType(NebulaToolboxError, ValueError):
    """A field declaration names a type this client does not handle."""


class DecodeError(NebulaToolboxError, ValueError):
    """A result cell cannot be decoded as the declared field type."""


class IllegalField(NebulaToolboxError, ValueError):
    """A field is not part of the schema it is used against."""


class MissingValue(NebulaToolboxError, ValueError):
    """A required identifier or field value was not supplied."""


class AlreadyExists(NebulaToolboxError):
    """A vertex with the same vid already exists on the tag."""


class NoDataError(NebulaToolboxError, LookupError):
    """No data is stored at the requested key."""


class ContractViolation(RuntimeError):
    """Irrecoverable programming-contract violation."""

    def __init__(self, message: str, *, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__(message if detail is None else f"{message}. {detail}")


__all__ = [
    "NebulaToolboxError",
    "ConfigError",
    "GraphConnectionError",
    "StatementError",
    "BatchExecutionError",
    "TypeMismatch",
    "UnsupportedType",
    "DecodeError",
    "IllegalField",
    "MissingValue",
    "AlreadyExists",
    "NoDataError",
    "ContractViolation",
]
