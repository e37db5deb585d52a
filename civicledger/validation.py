"""Argument validation for CivicLedger contract calls.

A ledger refuses an ill-typed transaction before any contract code runs. This
module reproduces that gate: every contract operation has a JSON Schema
describing its arguments (principals, unsigned integers, bounded strings), and
ArgumentValidator checks a call's arguments against it.

Sign checks that have their own contract error code (budget, duration,
required verification count) are deliberately left to the contract
operations, so the schemas only require those to be integers.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import jsonschema
from jsonschema import Draft7Validator, validators

from civicledger.config import DEFAULT_CONFIG, LedgerConfig
from civicledger.errors import ArgumentError, InvalidArgumentsError
from civicledger.types import ArgumentErrorCode


def _is_strict_integer(checker, instance) -> bool:
    return isinstance(instance, int) and not isinstance(instance, bool)


# Draft 7 treats 1.0 as an integer; ledger integers are never floats.
LedgerValidator = validators.extend(
    Draft7Validator,
    type_checker=Draft7Validator.TYPE_CHECKER.redefine("integer", _is_strict_integer),
)

PRINCIPAL = {"type": "string", "minLength": 1}
UINT = {"type": "integer", "minimum": 0}
INT = {"type": "integer"}


def _object(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


def build_schemas(config: LedgerConfig = DEFAULT_CONFIG) -> Dict[str, Dict[str, Any]]:
    """Build the argument schema for every contract operation.

    Examples:
        >>> schemas = build_schemas()
        >>> schemas["register_project"]["properties"]["name"]["maxLength"]
        100
    """
    name = {"type": "string", "minLength": 1, "maxLength": config.max_name_length}
    description = {"type": "string", "maxLength": config.max_description_length}
    metric_name = {"type": "string", "minLength": 1, "maxLength": config.max_metric_name_length}

    return {
        # Performance measurement
        "register_project": _object({
            "caller": PRINCIPAL,
            "name": name,
            "department": PRINCIPAL,
            "budget": INT,
            "duration": INT,
        }),
        "add_project_manager": _object({
            "caller": PRINCIPAL, "project_id": UINT, "manager": PRINCIPAL,
        }),
        "remove_project_manager": _object({
            "caller": PRINCIPAL, "project_id": UINT, "manager": PRINCIPAL,
        }),
        "record_performance_metric": _object({
            "caller": PRINCIPAL,
            "project_id": UINT,
            "metric_name": metric_name,
            "value": INT,
        }),
        "add_project_milestone": _object({
            "caller": PRINCIPAL,
            "project_id": UINT,
            "milestone_id": UINT,
            "description": description,
            "target_block": UINT,
        }),
        "complete_project_milestone": _object({
            "caller": PRINCIPAL, "project_id": UINT, "milestone_id": UINT,
        }),
        # Procurement verification
        "add_verifier": _object({"caller": PRINCIPAL, "address": PRINCIPAL}),
        "remove_verifier": _object({"caller": PRINCIPAL, "address": PRINCIPAL}),
        "set_procurement_rules": _object({
            "caller": PRINCIPAL,
            "department": PRINCIPAL,
            "threshold": UINT,
            "required_verifications": INT,
        }),
        "verify_procurement": _object({"caller": PRINCIPAL, "expenditure_id": UINT}),
        "transfer_admin": _object({"caller": PRINCIPAL, "new_admin": PRINCIPAL}),
        # Expenditure tracking
        "record_expenditure": {
            "type": "object",
            "properties": {
                "department": PRINCIPAL,
                "amount": UINT,
                "description": description,
                "expenditure_id": UINT,
                "timestamp": UINT,
            },
            "required": ["department", "amount", "description"],
            "additionalProperties": False,
        },
    }


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating call arguments.

    Attributes:
        is_valid: Whether the arguments passed all checks
        errors: Per-argument errors (empty if valid)
    """
    is_valid: bool
    errors: List[ArgumentError]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
        }


class ArgumentValidator:
    """Validates contract call arguments against per-operation schemas.

    Examples:
        >>> validator = ArgumentValidator()
        >>> validator.validate("add_verifier", {"caller": "ST1", "address": "ST2"}).is_valid
        True
        >>> validator.validate("add_verifier", {"caller": "", "address": "ST2"}).is_valid
        False
    """

    def __init__(self, config: LedgerConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self._validators: Dict[str, Draft7Validator] = {}
        for operation, schema in build_schemas(config).items():
            LedgerValidator.check_schema(schema)
            self._validators[operation] = LedgerValidator(schema)

    def validate(self, operation: str, arguments: Dict[str, Any]) -> ValidationResult:
        """Validate arguments for an operation.

        Raises:
            KeyError: If the operation has no schema
        """
        validator = self._validators[operation]
        errors = [
            self._translate_error(error)
            for error in sorted(validator.iter_errors(arguments), key=lambda e: list(e.path))
        ]
        return ValidationResult(is_valid=not errors, errors=errors)

    def check(self, operation: str, arguments: Dict[str, Any]) -> None:
        """Validate arguments, raising InvalidArgumentsError on failure."""
        result = self.validate(operation, arguments)
        if not result.is_valid:
            raise InvalidArgumentsError(operation, result.errors)

    def _translate_error(self, error: jsonschema.ValidationError) -> ArgumentError:
        """Translate a jsonschema ValidationError to an ArgumentError."""
        path = ".".join(str(p) for p in error.path)

        if error.validator == "required":
            missing = error.message.split("'")[1] if "'" in error.message else "argument"
            return ArgumentError(
                path=missing,
                code=ArgumentErrorCode.REQUIRED,
                message=f"Argument '{missing}' is required but was not provided",
                expected="required argument",
            )

        if error.validator == "additionalProperties":
            return ArgumentError(
                path=path,
                code=ArgumentErrorCode.CUSTOM,
                message=f"Unexpected arguments: {error.message}",
            )

        if error.validator == "type":
            received_type = type(error.instance).__name__
            return ArgumentError(
                path=path,
                code=ArgumentErrorCode.INVALID_TYPE,
                message=f"Argument '{path}' has invalid type. Expected {error.validator_value}, got {received_type}",
                expected=error.validator_value,
                received=received_type,
            )

        if error.validator == "minLength":
            return ArgumentError(
                path=path,
                code=ArgumentErrorCode.TOO_SHORT,
                message=f"Argument '{path}' is too short. Minimum length: {error.validator_value}",
                expected=f"minimum {error.validator_value} characters",
                received=f"{len(error.instance)} characters",
            )

        if error.validator == "maxLength":
            return ArgumentError(
                path=path,
                code=ArgumentErrorCode.TOO_LONG,
                message=f"Argument '{path}' is too long. Maximum length: {error.validator_value}",
                expected=f"maximum {error.validator_value} characters",
                received=f"{len(error.instance)} characters",
            )

        if error.validator == "minimum":
            return ArgumentError(
                path=path,
                code=ArgumentErrorCode.INVALID_VALUE,
                message=f"Argument '{path}' must be an unsigned integer",
                expected=f"minimum: {error.validator_value}",
                received=error.instance,
            )

        return ArgumentError(
            path=path,
            code=ArgumentErrorCode.CUSTOM,
            message=f"Argument '{path}' validation failed: {error.message}",
            expected=error.validator_value,
            received=error.instance,
        )


_default_validator: Optional[ArgumentValidator] = None


def default_validator() -> ArgumentValidator:
    """Shared validator for the default configuration."""
    global _default_validator
    if _default_validator is None:
        _default_validator = ArgumentValidator()
    return _default_validator


__all__ = [
    "ArgumentValidator",
    "ValidationResult",
    "build_schemas",
    "default_validator",
]
