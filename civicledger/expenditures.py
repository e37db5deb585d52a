"""Expenditure tracking collaborator.

Expenditures are owned by a separate contract. The procurement-verification
contract only reads them, through the ExpenditureSource protocol, so any
object with a ``get_expenditure`` method can stand in for this registry.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
import uuid

from typing_extensions import Protocol

from civicledger.chain import BlockSource, SystemBlockSource
from civicledger.config import DEFAULT_CONFIG, LedgerConfig
from civicledger.events import ContractEvent, EventEmitter
from civicledger.logging_config import get_logger
from civicledger.types import ContractName, EventType, Expenditure
from civicledger.validation import ArgumentValidator, default_validator

logger = get_logger("expenditures")


class ExpenditureSource(Protocol):
    """Read-only view of an expenditure store."""

    def get_expenditure(self, expenditure_id: int) -> Optional[Expenditure]:
        ...


class ExpenditureRegistry:
    """In-memory expenditure-tracking contract.

    Ids are assigned sequentially starting at 1 unless an explicit id is
    given. An explicit id may not overwrite an existing expenditure.

    Examples:
        >>> from civicledger.chain import ManualBlockSource
        >>> registry = ExpenditureRegistry(blocks=ManualBlockSource(7))
        >>> registry.record("ST2DEPT", 20000, "Office equipment")
        1
        >>> registry.get_expenditure(1).amount
        20000
    """

    def __init__(
        self,
        blocks: Optional[BlockSource] = None,
        config: LedgerConfig = DEFAULT_CONFIG,
        emitter: Optional[EventEmitter] = None,
    ):
        self.blocks = blocks or SystemBlockSource()
        self.config = config
        self.emitter = emitter
        self._validator = default_validator() if config is DEFAULT_CONFIG else ArgumentValidator(config)
        self._expenditures: Dict[int, Expenditure] = {}
        self._next_id = 1
        self._events: List[ContractEvent] = []

    def record(
        self,
        department: str,
        amount: int,
        description: str,
        timestamp: Optional[int] = None,
        expenditure_id: Optional[int] = None,
    ) -> int:
        """Record an expenditure and return its id.

        Args:
            department: Spending department principal
            amount: Amount spent
            description: Free-text description
            timestamp: Block height to record; defaults to the current height
            expenditure_id: Explicit id; defaults to the next sequential id

        Raises:
            InvalidArgumentsError: If the arguments are malformed
            ValueError: If expenditure_id is already taken
        """
        arguments = {"department": department, "amount": amount, "description": description}
        if expenditure_id is not None:
            arguments["expenditure_id"] = expenditure_id
        if timestamp is not None:
            arguments["timestamp"] = timestamp
        self._validator.check("record_expenditure", arguments)

        if expenditure_id is None:
            expenditure_id = self._next_id
        elif expenditure_id in self._expenditures:
            raise ValueError(f"Expenditure {expenditure_id} already exists")
        next_id = max(self._next_id, expenditure_id + 1)

        height = self.blocks.height()
        self._expenditures[expenditure_id] = Expenditure(
            department=department,
            amount=amount,
            description=description,
            timestamp=height if timestamp is None else timestamp,
        )
        self._next_id = next_id

        event = ContractEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=EventType.EXPENDITURE_RECORDED,
            contract=ContractName.EXPENDITURE_TRACKING,
            block=height,
            caller=department,
            ts=datetime.now(timezone.utc),
            payload={"expenditureId": expenditure_id, "amount": amount},
        )
        self._events.append(event)
        if self.emitter is not None:
            self.emitter.emit(event)

        logger.info(
            "expenditure_recorded",
            extra={"expenditure_id": expenditure_id, "department": department, "amount": amount},
        )
        return expenditure_id

    def get_expenditure(self, expenditure_id: int) -> Optional[Expenditure]:
        """Look up an expenditure; None if absent."""
        return self._expenditures.get(expenditure_id)

    def get_events(self) -> List[ContractEvent]:
        """All events emitted by this registry, in order."""
        return list(self._events)

    def __len__(self) -> int:
        return len(self._expenditures)


__all__ = [
    "ExpenditureSource",
    "ExpenditureRegistry",
]
