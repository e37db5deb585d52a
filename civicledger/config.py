"""Deployment configuration for the CivicLedger contracts."""

from dataclasses import dataclass, fields
from typing import Any, Dict

_CAMEL_KEYS = {
    "default_threshold": "defaultThreshold",
    "default_required_verifications": "defaultRequiredVerifications",
    "max_name_length": "maxNameLength",
    "max_description_length": "maxDescriptionLength",
    "max_metric_name_length": "maxMetricNameLength",
}


@dataclass(frozen=True)
class LedgerConfig:
    """Constants fixed at contract deployment.

    Attributes:
        default_threshold: Threshold used for departments without a rule
        default_required_verifications: Verification count used for departments without a rule
        max_name_length: Maximum length of project names
        max_description_length: Maximum length of milestone and expenditure descriptions
        max_metric_name_length: Maximum length of performance metric names

    Examples:
        >>> LedgerConfig().default_threshold
        10000
        >>> LedgerConfig.from_dict({"defaultThreshold": 500}).default_threshold
        500
    """
    default_threshold: int = 10000
    default_required_verifications: int = 1
    max_name_length: int = 100
    max_description_length: int = 256
    max_metric_name_length: int = 64

    def __post_init__(self):
        if self.default_required_verifications <= 0:
            raise ValueError("default_required_verifications must be positive")
        for name in ("max_name_length", "max_description_length", "max_metric_name_length"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {_CAMEL_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerConfig":
        """Create LedgerConfig from dict, using defaults for absent keys.

        Raises:
            ValueError: If the dict contains unknown keys
        """
        known = {camel: snake for snake, camel in _CAMEL_KEYS.items()}
        unknown = set(data) - set(known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**{known[key]: value for key, value in data.items()})


DEFAULT_CONFIG = LedgerConfig()


__all__ = [
    "LedgerConfig",
    "DEFAULT_CONFIG",
]
