"""Procurement verification contract.

Gates expenditures at or above a per-department threshold behind a sign-off
from an active verifier. The admin manages verifiers and department rules;
expenditures are read from a collaborator store this contract does not own.

Error codes (3xx):

    300  caller is not the admin
    301  required verification count is not positive
    302  expenditure does not exist
    303  caller is not an active verifier
    304  expenditure already verified
    305  expenditure amount below the department threshold
    306  caller is not the admin (admin transfer)

The configured ``required_verifications`` count is stored and returned by
``get_procurement_rules`` but a single verification marks an expenditure as
verified regardless of its value.
"""

from typing import Optional

from civicledger.errors import ContractError, ContractResult, Ok
from civicledger.expenditures import ExpenditureSource
from civicledger.logging_config import get_logger
from civicledger.store import ProcurementStore
from civicledger.types import (
    ErrorCode,
    EventType,
    ProcurementRule,
    Verification,
    Verifier,
)

logger = get_logger("procurement")


def _reject(operation: str, caller: str, code: ErrorCode) -> ContractError:
    logger.warning(
        "call_rejected",
        extra={"operation": operation, "caller": caller, "error_code": int(code)},
    )
    return ContractError(code)


# ---------------------------------------------------------------------------
# Read-only queries
# ---------------------------------------------------------------------------


def is_admin(store: ProcurementStore, address: str) -> bool:
    return address == store.admin


def is_authorized(store: ProcurementStore, address: str) -> bool:
    """True if address is an active verifier."""
    entry = store.verifiers.get(address)
    return entry is not None and entry.active


def is_verified(store: ProcurementStore, expenditure_id: int) -> bool:
    entry = store.verifications.get(expenditure_id)
    return entry is not None and entry.verified


def get_verification_details(
    store: ProcurementStore, expenditure_id: int
) -> Optional[Verification]:
    return store.verifications.get(expenditure_id)


def get_procurement_rules(store: ProcurementStore, department: str) -> ProcurementRule:
    """Rule for department, or the default rule if none is configured."""
    return store.procurement_rules.get(department) or store.default_rule()


# ---------------------------------------------------------------------------
# Admin operations
# ---------------------------------------------------------------------------


def _set_verifier(
    store: ProcurementStore, operation: str, caller: str, address: str, active: bool
) -> ContractResult:
    store.validator.check(operation, {"caller": caller, "address": address})
    if not is_admin(store, caller):
        return _reject(operation, caller, ErrorCode.NOT_ADMIN)

    store.verifiers[address] = Verifier(active=active)

    event_type = EventType.VERIFIER_ADDED if active else EventType.VERIFIER_REMOVED
    store.emit(event_type, caller, {"verifier": address})
    logger.info(event_type.value, extra={"verifier": address})
    return Ok(True)


def add_verifier(store: ProcurementStore, caller: str, address: str) -> ContractResult:
    """Grant verifier rights to address. Admin only."""
    return _set_verifier(store, "add_verifier", caller, address, True)


def remove_verifier(store: ProcurementStore, caller: str, address: str) -> ContractResult:
    """Revoke verifier rights from address. Admin only."""
    return _set_verifier(store, "remove_verifier", caller, address, False)


def set_procurement_rules(
    store: ProcurementStore,
    caller: str,
    department: str,
    threshold: int,
    required_verifications: int,
) -> ContractResult:
    """Create or replace the verification rule for a department. Admin only."""
    store.validator.check("set_procurement_rules", {
        "caller": caller,
        "department": department,
        "threshold": threshold,
        "required_verifications": required_verifications,
    })
    if not is_admin(store, caller):
        return _reject("set_procurement_rules", caller, ErrorCode.NOT_ADMIN)
    if required_verifications <= 0:
        return _reject("set_procurement_rules", caller, ErrorCode.INVALID_VERIFICATION_COUNT)

    rule = ProcurementRule(threshold=threshold, required_verifications=required_verifications)
    store.procurement_rules[department] = rule

    store.emit(EventType.RULES_SET, caller, {"department": department, **rule.to_dict()})
    logger.info(
        "rules_set",
        extra={
            "department": department,
            "threshold": threshold,
            "required_verifications": required_verifications,
        },
    )
    return Ok(True)


def transfer_admin(store: ProcurementStore, caller: str, new_admin: str) -> ContractResult:
    """Hand the admin role to new_admin. The previous admin loses it immediately."""
    store.validator.check("transfer_admin", {"caller": caller, "new_admin": new_admin})
    if not is_admin(store, caller):
        return _reject("transfer_admin", caller, ErrorCode.TRANSFER_NOT_ADMIN)

    store.admin = new_admin

    store.emit(EventType.ADMIN_TRANSFERRED, caller, {"previousAdmin": caller, "newAdmin": new_admin})
    logger.info("admin_transferred", extra={"previous_admin": caller, "new_admin": new_admin})
    return Ok(True)


# ---------------------------------------------------------------------------
# Verifier operations
# ---------------------------------------------------------------------------


def verify_procurement(
    store: ProcurementStore,
    expenditures: ExpenditureSource,
    caller: str,
    expenditure_id: int,
) -> ContractResult:
    """Sign off an expenditure as procurement-verified.

    Checks, in order: the expenditure exists (302), the caller is an active
    verifier (303), it has not been verified yet (304), and its amount meets
    the department threshold (305).
    """
    store.validator.check("verify_procurement", {
        "caller": caller, "expenditure_id": expenditure_id,
    })
    expenditure = expenditures.get_expenditure(expenditure_id)
    if expenditure is None:
        return _reject("verify_procurement", caller, ErrorCode.EXPENDITURE_NOT_FOUND)
    if not is_authorized(store, caller):
        return _reject("verify_procurement", caller, ErrorCode.NOT_VERIFIER)
    if is_verified(store, expenditure_id):
        return _reject("verify_procurement", caller, ErrorCode.ALREADY_VERIFIED)

    rule = get_procurement_rules(store, expenditure.department)
    if expenditure.amount < rule.threshold:
        return _reject("verify_procurement", caller, ErrorCode.BELOW_THRESHOLD)

    height = store.height()
    store.verifications[expenditure_id] = Verification(
        verifier=caller,
        verified=True,
        timestamp=height,
    )

    store.emit(EventType.PROCUREMENT_VERIFIED, caller, {
        "expenditureId": expenditure_id,
        "department": expenditure.department,
        "amount": expenditure.amount,
    })
    logger.info(
        "procurement_verified",
        extra={"expenditure_id": expenditure_id, "verifier": caller, "block": height},
    )
    return Ok(True)


__all__ = [
    "is_admin",
    "is_authorized",
    "is_verified",
    "get_verification_details",
    "get_procurement_rules",
    "add_verifier",
    "remove_verifier",
    "set_procurement_rules",
    "transfer_admin",
    "verify_procurement",
]
