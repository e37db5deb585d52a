"""Contract state for the CivicLedger contracts.

Each contract's persistent key-value maps live on an explicit store object
that is passed to every operation, instead of process-wide globals. The admin
identity is a field of the store. Composite keys are tuples.

Usage:
    >>> from civicledger.chain import ManualBlockSource
    >>> store = PerformanceStore(admin="ST1ADMIN", blocks=ManualBlockSource(10))
    >>> store.project_counter
    0
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Tuple
import uuid

from civicledger.chain import BlockSource, SystemBlockSource
from civicledger.config import DEFAULT_CONFIG, LedgerConfig
from civicledger.events import ContractEvent, EventEmitter
from civicledger.types import (
    ContractName,
    EventType,
    Milestone,
    PerformanceMetric,
    ProcurementRule,
    Project,
    ProjectManager,
    Verification,
    Verifier,
)
from civicledger.validation import ArgumentValidator, default_validator


@dataclass
class ContractStore:
    """State shared by every contract: admin, block source, and event trail.

    Attributes:
        admin: Principal authorized for privileged operations
        blocks: Source of the current block height
        config: Deployment constants
        emitter: Optional emitter that receives every event
    """
    admin: str
    blocks: BlockSource = field(default_factory=SystemBlockSource)
    config: LedgerConfig = DEFAULT_CONFIG
    emitter: Optional[EventEmitter] = None
    _events: List[ContractEvent] = field(default_factory=list, init=False, repr=False)
    _validator: ArgumentValidator = field(init=False, repr=False)

    contract: ClassVar[ContractName]

    def __post_init__(self):
        if self.config is DEFAULT_CONFIG:
            self._validator = default_validator()
        else:
            self._validator = ArgumentValidator(self.config)

    @property
    def validator(self) -> ArgumentValidator:
        return self._validator

    def height(self) -> int:
        """Current block height."""
        return self.blocks.height()

    def emit(self, event_type: EventType, caller: str, payload: Dict[str, Any]) -> ContractEvent:
        """Record an event for a successful write and dispatch it."""
        event = ContractEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=event_type,
            contract=self.contract,
            block=self.height(),
            caller=caller,
            ts=datetime.now(timezone.utc),
            payload=payload,
        )
        self._events.append(event)
        if self.emitter is not None:
            self.emitter.emit(event)
        return event

    def get_events(self) -> List[ContractEvent]:
        """All events emitted by this store, in order."""
        return list(self._events)


@dataclass
class PerformanceStore(ContractStore):
    """Maps owned by the performance-measurement contract."""
    project_counter: int = 0
    projects: Dict[int, Project] = field(default_factory=dict)
    project_managers: Dict[Tuple[int, str], ProjectManager] = field(default_factory=dict)
    performance_metrics: Dict[Tuple[int, str], PerformanceMetric] = field(default_factory=dict)
    project_milestones: Dict[Tuple[int, int], Milestone] = field(default_factory=dict)

    contract: ClassVar[ContractName] = ContractName.PERFORMANCE_MEASUREMENT


@dataclass
class ProcurementStore(ContractStore):
    """Maps owned by the procurement-verification contract.

    The expenditure map is not owned here; operations read it through an
    ExpenditureSource passed alongside the store.
    """
    verifiers: Dict[str, Verifier] = field(default_factory=dict)
    verifications: Dict[int, Verification] = field(default_factory=dict)
    procurement_rules: Dict[str, ProcurementRule] = field(default_factory=dict)

    contract: ClassVar[ContractName] = ContractName.PROCUREMENT_VERIFICATION

    def default_rule(self) -> ProcurementRule:
        """Rule applied to departments without a configured rule."""
        return ProcurementRule(
            threshold=self.config.default_threshold,
            required_verifications=self.config.default_required_verifications,
        )


__all__ = [
    "ContractStore",
    "PerformanceStore",
    "ProcurementStore",
]
