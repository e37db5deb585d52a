"""CivicLedger: public-works performance and procurement contracts.

CivicLedger simulates two ledger contracts in-process:
- Performance measurement: project registry, per-project managers,
  performance metrics and milestones
- Procurement verification: verifier roles, per-department thresholds and
  one-way verification of expenditures

Contract state lives on explicit store objects, block height is injected,
and every fallible operation returns ``Ok`` or a numeric ``ContractError``.

Basic usage:
    >>> from civicledger import LedgerRuntime, performance
    >>> from civicledger.chain import ManualBlockSource
    >>> runtime = LedgerRuntime.deploy("ST1ADMIN", block_source=ManualBlockSource(1))
    >>> performance.register_project(
    ...     runtime.performance, "ST1ADMIN", "Road Construction", "ST2DEPT", 1000000, 5000
    ... ).ok
    True
"""

__version__ = "0.1.0"
__author__ = "CivicLedger Team"

# Version info
VERSION = (0, 1, 0)

# Core exports
from civicledger import performance, procurement
from civicledger.errors import ContractCallError, ContractError, InvalidArgumentsError, Ok
from civicledger.runtime import LedgerRuntime
from civicledger.types import ErrorCode

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "LedgerRuntime",
    "Ok",
    "ContractError",
    "ContractCallError",
    "InvalidArgumentsError",
    "ErrorCode",
    "performance",
    "procurement",
]
