"""Core type definitions for the CivicLedger contracts.

This module defines the fundamental types shared by both contract modules:
- ErrorCode: Numeric error codes returned by contract calls (3xx and 4xx)
- ArgumentErrorCode: Codes for arguments rejected before a call executes
- EventType: Audit event types emitted on successful state changes
- ContractName: Identifies which contract emitted an event
- Record types: Project, ProjectManager, PerformanceMetric, Milestone,
  Verifier, ProcurementRule, Verification, Expenditure

Records are immutable snapshots. Contract operations replace a map entry with
a new record rather than mutating it in place, so a record handed out by a
read-only query never changes underneath the caller.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict


class ErrorCode(IntEnum):
    """Numeric error codes returned by contract operations.

    Codes are partitioned by contract: 3xx for procurement verification,
    4xx for performance measurement. They are the only wire-visible part of
    a failed call.
    """
    # Procurement verification
    NOT_ADMIN = 300
    INVALID_VERIFICATION_COUNT = 301
    EXPENDITURE_NOT_FOUND = 302
    NOT_VERIFIER = 303
    ALREADY_VERIFIED = 304
    BELOW_THRESHOLD = 305
    TRANSFER_NOT_ADMIN = 306

    # Performance measurement
    NOT_PROJECT_ADMIN = 400
    INVALID_BUDGET = 401
    INVALID_DURATION = 402
    PROJECT_NOT_FOUND = 403
    NOT_PROJECT_MANAGER = 404
    MILESTONE_NOT_FOUND = 405
    MILESTONE_ALREADY_COMPLETED = 406


class ArgumentErrorCode(str, Enum):
    """Error codes for malformed contract call arguments.

    Used in ArgumentError objects when a call is rejected before execution.
    """
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_FORMAT = "invalid_format"
    INVALID_VALUE = "invalid_value"
    TOO_LONG = "too_long"
    TOO_SHORT = "too_short"
    CUSTOM = "custom"


class ContractName(str, Enum):
    """Contracts that can emit events."""
    PERFORMANCE_MEASUREMENT = "performance-measurement"
    PROCUREMENT_VERIFICATION = "procurement-verification"
    EXPENDITURE_TRACKING = "expenditure-tracking"


class EventType(str, Enum):
    """Audit event types for the event stream.

    Every successful state change emits exactly one typed event.
    """
    PROJECT_REGISTERED = "project.registered"
    MANAGER_ADDED = "manager.added"
    MANAGER_REMOVED = "manager.removed"
    METRIC_RECORDED = "metric.recorded"
    MILESTONE_ADDED = "milestone.added"
    MILESTONE_COMPLETED = "milestone.completed"
    VERIFIER_ADDED = "verifier.added"
    VERIFIER_REMOVED = "verifier.removed"
    RULES_SET = "rules.set"
    PROCUREMENT_VERIFIED = "procurement.verified"
    ADMIN_TRANSFERRED = "admin.transferred"
    EXPENDITURE_RECORDED = "expenditure.recorded"


@dataclass(frozen=True)
class Project:
    """A registered public-works project.

    Attributes:
        name: Display name (e.g., "Road Construction")
        department: Principal of the owning department
        budget: Allocated budget, always positive
        start_block: Block height at registration
        end_block: start_block plus the requested duration

    Examples:
        >>> p = Project(name="Road Construction", department="ST2CY", budget=1000000,
        ...             start_block=10, end_block=5010)
        >>> p.end_block - p.start_block
        5000
    """
    name: str
    department: str
    budget: int
    start_block: int
    end_block: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "name": self.name,
            "department": self.department,
            "budget": self.budget,
            "startBlock": self.start_block,
            "endBlock": self.end_block,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        """Create Project from dict."""
        return cls(
            name=data["name"],
            department=data["department"],
            budget=data["budget"],
            start_block=data["startBlock"],
            end_block=data["endBlock"],
        )


@dataclass(frozen=True)
class ProjectManager:
    """Manager role entry for a (project, address) pair."""
    active: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"active": self.active}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectManager":
        """Create ProjectManager from dict."""
        return cls(active=data["active"])


@dataclass(frozen=True)
class PerformanceMetric:
    """Latest recorded value of a named project metric.

    Re-recording a metric overwrites the previous entry; no history is kept.

    Attributes:
        value: Recorded value
        recorded_by: Manager who recorded it
        timestamp: Block height at recording time
    """
    value: int
    recorded_by: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "value": self.value,
            "recordedBy": self.recorded_by,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PerformanceMetric":
        """Create PerformanceMetric from dict."""
        return cls(
            value=data["value"],
            recorded_by=data["recordedBy"],
            timestamp=data["timestamp"],
        )


@dataclass(frozen=True)
class Milestone:
    """A project milestone.

    Attributes:
        description: What the milestone represents
        target_block: Block height the milestone is planned for
        completed: One-way flag, never reset once True
        completion_block: Height at completion, 0 while incomplete
    """
    description: str
    target_block: int
    completed: bool = False
    completion_block: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "description": self.description,
            "targetBlock": self.target_block,
            "completed": self.completed,
            "completionBlock": self.completion_block,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Milestone":
        """Create Milestone from dict."""
        return cls(
            description=data["description"],
            target_block=data["targetBlock"],
            completed=data.get("completed", False),
            completion_block=data.get("completionBlock", 0),
        )


@dataclass(frozen=True)
class Verifier:
    """Verifier role entry for an address."""
    active: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"active": self.active}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Verifier":
        """Create Verifier from dict."""
        return cls(active=data["active"])


@dataclass(frozen=True)
class ProcurementRule:
    """Verification rule for a department.

    Attributes:
        threshold: Minimum expenditure amount that can be verified
        required_verifications: Configured verifier count, always positive

    Examples:
        >>> ProcurementRule(threshold=20000, required_verifications=2).to_dict()
        {'threshold': 20000, 'requiredVerifications': 2}
    """
    threshold: int
    required_verifications: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "threshold": self.threshold,
            "requiredVerifications": self.required_verifications,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcurementRule":
        """Create ProcurementRule from dict."""
        return cls(
            threshold=data["threshold"],
            required_verifications=data["requiredVerifications"],
        )


@dataclass(frozen=True)
class Verification:
    """Result of verifying an expenditure.

    Attributes:
        verifier: Address of the verifier that signed off
        verified: One-way flag
        timestamp: Block height at verification time
    """
    verifier: str
    verified: bool
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "verifier": self.verifier,
            "verified": self.verified,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Verification":
        """Create Verification from dict."""
        return cls(
            verifier=data["verifier"],
            verified=data["verified"],
            timestamp=data["timestamp"],
        )


@dataclass(frozen=True)
class Expenditure:
    """An expenditure owned by the expenditure-tracking collaborator.

    Attributes:
        department: Principal of the spending department
        amount: Amount spent
        description: Free-text description (e.g., "Office equipment")
        timestamp: Block height at which it was recorded
    """
    department: str
    amount: int
    description: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "department": self.department,
            "amount": self.amount,
            "description": self.description,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expenditure":
        """Create Expenditure from dict."""
        return cls(
            department=data["department"],
            amount=data["amount"],
            description=data["description"],
            timestamp=data["timestamp"],
        )


__all__ = [
    "ErrorCode",
    "ArgumentErrorCode",
    "ContractName",
    "EventType",
    "Project",
    "ProjectManager",
    "PerformanceMetric",
    "Milestone",
    "Verifier",
    "ProcurementRule",
    "Verification",
    "Expenditure",
]
