"""Result and error types for CivicLedger contract calls.

Every fallible contract operation returns a discriminated result: either an
``Ok`` carrying the success value or a ``ContractError`` carrying exactly one
numeric ``ErrorCode``. Precondition failures are values, not exceptions; the
caller (the transaction submitter) decides whether to resubmit.

Two exceptions exist for the cases that are not precondition failures:
- ContractCallError: raised by ``unwrap()`` for callers that prefer exceptions
- InvalidArgumentsError: raised when call arguments are malformed and the call
  is rejected before it executes (see civicledger.validation)
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from typing_extensions import TypeAlias

from civicledger.types import ArgumentErrorCode, ErrorCode

T = TypeVar("T")


class ContractCallError(Exception):
    """Raised when unwrapping a failed contract result.

    Attributes:
        code: The ErrorCode the call failed with
    """

    def __init__(self, code: ErrorCode, message: Optional[str] = None):
        self.code = code
        super().__init__(message or f"Contract call failed with error {int(code)} ({code.name})")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful contract call result.

    Examples:
        >>> result = Ok(True)
        >>> result.ok
        True
        >>> result.to_dict()
        {'value': True}
    """
    value: T

    @property
    def ok(self) -> bool:
        """Always returns True - this is a success response."""
        return True

    def unwrap(self) -> T:
        """Return the success value."""
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"value": self.value}


@dataclass(frozen=True)
class ContractError:
    """Failed contract call result.

    Attributes:
        code: Numeric error code identifying the violated precondition

    Examples:
        >>> err = ContractError(ErrorCode.NOT_ADMIN)
        >>> err.ok
        False
        >>> err.to_dict()
        {'error': 300}
    """
    code: ErrorCode

    @property
    def ok(self) -> bool:
        """Always returns False - this is an error response."""
        return False

    def unwrap(self) -> Any:
        """Raise ContractCallError carrying this result's code."""
        raise ContractCallError(self.code)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"error": int(self.code)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContractError":
        """Create ContractError from dict."""
        return cls(code=ErrorCode(data["error"]))


ContractResult: TypeAlias = Union[Ok[Any], ContractError]


def result_from_dict(data: Dict[str, Any]) -> ContractResult:
    """Rebuild a ContractResult from its serialized form.

    Raises:
        ValueError: If the dict has neither a "value" nor an "error" key
    """
    if "error" in data:
        return ContractError.from_dict(data)
    if "value" in data:
        return Ok(data["value"])
    raise ValueError(f"Not a contract result: {data!r}")


@dataclass(frozen=True)
class ArgumentError:
    """Per-argument validation error details.

    Attributes:
        path: Argument name (e.g., "budget", "name")
        code: Specific validation error code
        message: Human-readable error description
        expected: Optional - what was expected
        received: Optional - what was actually received
    """
    path: str
    code: ArgumentErrorCode
    message: str
    expected: Optional[Any] = None
    received: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "path": self.path,
            "code": self.code.value if isinstance(self.code, ArgumentErrorCode) else self.code,
            "message": self.message,
        }
        if self.expected is not None:
            result["expected"] = self.expected
        if self.received is not None:
            result["received"] = self.received
        return result


class InvalidArgumentsError(Exception):
    """Raised when a contract call is rejected before execution.

    The ledger refuses an ill-typed transaction outright; no error code is
    returned and no state changes.

    Attributes:
        operation: Name of the rejected operation
        errors: Per-argument validation failures
    """

    def __init__(self, operation: str, errors: List[ArgumentError]):
        self.operation = operation
        self.errors = errors
        details = "; ".join(e.message for e in errors)
        super().__init__(f"Invalid arguments for '{operation}': {details}")


__all__ = [
    "Ok",
    "ContractError",
    "ContractResult",
    "ContractCallError",
    "ArgumentError",
    "InvalidArgumentsError",
    "result_from_dict",
]
