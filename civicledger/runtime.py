"""LedgerRuntime orchestrator for the CivicLedger contracts.

This module wires both contracts and the expenditure collaborator to a shared
block source and event emitter, the way a ledger deployment would. The
deploying principal becomes the admin of both contracts.

Usage:
    >>> from civicledger.chain import ManualBlockSource
    >>> runtime = LedgerRuntime.deploy("ST1ADMIN", block_source=ManualBlockSource(1))
    >>> runtime.performance.admin
    'ST1ADMIN'
    >>> runtime.procurement.admin
    'ST1ADMIN'
"""

from typing import List, Optional

from civicledger.chain import BlockSource, SystemBlockSource
from civicledger.config import DEFAULT_CONFIG, LedgerConfig
from civicledger.events import ContractEvent, EventEmitter
from civicledger.expenditures import ExpenditureRegistry
from civicledger.logging_config import get_logger
from civicledger.store import PerformanceStore, ProcurementStore

logger = get_logger("runtime")


class LedgerRuntime:
    """A deployment of both contracts sharing one block source.

    Attributes:
        deployer: Principal that deployed the contracts
        blocks: Shared block height source
        config: Shared deployment constants
        emitter: Receives every event from every contract
        performance: Performance-measurement store
        procurement: Procurement-verification store
        expenditures: Expenditure-tracking collaborator
    """

    def __init__(
        self,
        deployer: str,
        blocks: BlockSource,
        config: LedgerConfig,
        emitter: EventEmitter,
    ):
        self.deployer = deployer
        self.blocks = blocks
        self.config = config
        self.emitter = emitter
        self._events: List[ContractEvent] = []
        self.emitter.on_any(self._events.append)

        self.performance = PerformanceStore(
            admin=deployer, blocks=blocks, config=config, emitter=emitter
        )
        self.procurement = ProcurementStore(
            admin=deployer, blocks=blocks, config=config, emitter=emitter
        )
        self.expenditures = ExpenditureRegistry(blocks=blocks, config=config, emitter=emitter)

    @classmethod
    def deploy(
        cls,
        deployer: str,
        block_source: Optional[BlockSource] = None,
        config: Optional[LedgerConfig] = None,
        emitter: Optional[EventEmitter] = None,
    ) -> "LedgerRuntime":
        """Deploy both contracts with deployer as admin.

        Args:
            deployer: Principal that becomes admin of both contracts
            block_source: Block height source; wall-clock milliseconds if omitted
            config: Deployment constants; defaults if omitted
            emitter: Event emitter; a fresh one if omitted

        Raises:
            ValueError: If deployer is empty
        """
        if not deployer:
            raise ValueError("Deployer principal must not be empty")
        runtime = cls(
            deployer=deployer,
            blocks=block_source or SystemBlockSource(),
            config=config or DEFAULT_CONFIG,
            emitter=emitter or EventEmitter(),
        )
        logger.info(
            "contracts_deployed",
            extra={"deployer": deployer, "block": runtime.blocks.height()},
        )
        return runtime

    def events(self) -> List[ContractEvent]:
        """Combined audit trail of all contracts, in emission order."""
        return list(self._events)


__all__ = [
    "LedgerRuntime",
]
