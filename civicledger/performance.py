"""Performance measurement contract.

A registry of public-works projects. The admin registers projects and assigns
per-project managers; active managers record performance metrics and manage
milestones for their own projects.

Every write operation takes the store first and the calling principal second,
validates its arguments, and returns ``Ok(True)`` or a ``ContractError`` with
a 4xx code:

    400  caller is not the admin
    401  budget is not positive
    402  duration is not positive
    403  project does not exist
    404  caller is not an active manager of the project
    405  milestone does not exist
    406  milestone already completed

Usage:
    >>> from civicledger.chain import ManualBlockSource
    >>> store = PerformanceStore(admin="ST1ADMIN", blocks=ManualBlockSource(10))
    >>> register_project(store, "ST1ADMIN", "Road Construction", "ST2DEPT", 1000000, 5000)
    Ok(value=True)
    >>> get_project(store, 0).end_block
    5010
"""

from typing import Optional

from civicledger.errors import ContractError, ContractResult, Ok
from civicledger.logging_config import get_logger
from civicledger.store import PerformanceStore
from civicledger.types import (
    ErrorCode,
    EventType,
    Milestone,
    PerformanceMetric,
    Project,
    ProjectManager,
)

logger = get_logger("performance")


def _reject(operation: str, caller: str, code: ErrorCode) -> ContractError:
    logger.warning(
        "call_rejected",
        extra={"operation": operation, "caller": caller, "error_code": int(code)},
    )
    return ContractError(code)


# ---------------------------------------------------------------------------
# Read-only queries
# ---------------------------------------------------------------------------


def get_project_count(store: PerformanceStore) -> int:
    """Number of projects registered so far (also the next project id)."""
    return store.project_counter


def get_project(store: PerformanceStore, project_id: int) -> Optional[Project]:
    return store.projects.get(project_id)


def is_project_manager(store: PerformanceStore, address: str, project_id: int) -> bool:
    """True if address is an active manager of project_id."""
    entry = store.project_managers.get((project_id, address))
    return entry is not None and entry.active


def get_performance_metric(
    store: PerformanceStore, project_id: int, metric_name: str
) -> Optional[PerformanceMetric]:
    return store.performance_metrics.get((project_id, metric_name))


def get_project_milestone(
    store: PerformanceStore, project_id: int, milestone_id: int
) -> Optional[Milestone]:
    return store.project_milestones.get((project_id, milestone_id))


# ---------------------------------------------------------------------------
# Admin operations
# ---------------------------------------------------------------------------


def register_project(
    store: PerformanceStore,
    caller: str,
    name: str,
    department: str,
    budget: int,
    duration: int,
) -> ContractResult:
    """Register a new project under the next sequential id.

    The project starts at the current block height and ends ``duration``
    blocks later.

    Raises:
        InvalidArgumentsError: If the arguments are malformed
    """
    store.validator.check("register_project", {
        "caller": caller,
        "name": name,
        "department": department,
        "budget": budget,
        "duration": duration,
    })
    if caller != store.admin:
        return _reject("register_project", caller, ErrorCode.NOT_PROJECT_ADMIN)
    if budget <= 0:
        return _reject("register_project", caller, ErrorCode.INVALID_BUDGET)
    if duration <= 0:
        return _reject("register_project", caller, ErrorCode.INVALID_DURATION)

    project_id = store.project_counter
    store.project_counter += 1

    height = store.height()
    store.projects[project_id] = Project(
        name=name,
        department=department,
        budget=budget,
        start_block=height,
        end_block=height + duration,
    )

    store.emit(EventType.PROJECT_REGISTERED, caller, {
        "projectId": project_id,
        "department": department,
        "budget": budget,
    })
    logger.info("project_registered", extra={"project_id": project_id, "budget": budget})
    return Ok(True)


def _set_manager(
    store: PerformanceStore,
    operation: str,
    caller: str,
    project_id: int,
    manager: str,
    active: bool,
) -> ContractResult:
    store.validator.check(operation, {
        "caller": caller, "project_id": project_id, "manager": manager,
    })
    if caller != store.admin:
        return _reject(operation, caller, ErrorCode.NOT_PROJECT_ADMIN)
    if project_id not in store.projects:
        return _reject(operation, caller, ErrorCode.PROJECT_NOT_FOUND)

    store.project_managers[(project_id, manager)] = ProjectManager(active=active)

    event_type = EventType.MANAGER_ADDED if active else EventType.MANAGER_REMOVED
    store.emit(event_type, caller, {"projectId": project_id, "manager": manager})
    logger.info(event_type.value, extra={"project_id": project_id, "manager": manager})
    return Ok(True)


def add_project_manager(
    store: PerformanceStore, caller: str, project_id: int, manager: str
) -> ContractResult:
    """Authorize manager for project_id. Admin only."""
    return _set_manager(store, "add_project_manager", caller, project_id, manager, True)


def remove_project_manager(
    store: PerformanceStore, caller: str, project_id: int, manager: str
) -> ContractResult:
    """Revoke manager's authorization for project_id. Admin only.

    The entry is kept with ``active=False``; revocation takes effect on the
    next call.
    """
    return _set_manager(store, "remove_project_manager", caller, project_id, manager, False)


# ---------------------------------------------------------------------------
# Manager operations
# ---------------------------------------------------------------------------


def record_performance_metric(
    store: PerformanceStore,
    caller: str,
    project_id: int,
    metric_name: str,
    value: int,
) -> ContractResult:
    """Record (or overwrite) a named metric for a project.

    Authorization is checked before project existence, so an unknown project
    normally yields 404: nobody can manage a project that was never
    registered.
    """
    store.validator.check("record_performance_metric", {
        "caller": caller,
        "project_id": project_id,
        "metric_name": metric_name,
        "value": value,
    })
    if not is_project_manager(store, caller, project_id):
        return _reject("record_performance_metric", caller, ErrorCode.NOT_PROJECT_MANAGER)
    if project_id not in store.projects:
        return _reject("record_performance_metric", caller, ErrorCode.PROJECT_NOT_FOUND)

    store.performance_metrics[(project_id, metric_name)] = PerformanceMetric(
        value=value,
        recorded_by=caller,
        timestamp=store.height(),
    )

    store.emit(EventType.METRIC_RECORDED, caller, {
        "projectId": project_id,
        "metricName": metric_name,
        "value": value,
    })
    logger.info(
        "metric_recorded",
        extra={"project_id": project_id, "metric_name": metric_name, "value": value},
    )
    return Ok(True)


def add_project_milestone(
    store: PerformanceStore,
    caller: str,
    project_id: int,
    milestone_id: int,
    description: str,
    target_block: int,
) -> ContractResult:
    """Create an incomplete milestone for a project.

    Re-adding an existing milestone id replaces it, including its completion
    state.
    """
    store.validator.check("add_project_milestone", {
        "caller": caller,
        "project_id": project_id,
        "milestone_id": milestone_id,
        "description": description,
        "target_block": target_block,
    })
    if not is_project_manager(store, caller, project_id):
        return _reject("add_project_milestone", caller, ErrorCode.NOT_PROJECT_MANAGER)
    if project_id not in store.projects:
        return _reject("add_project_milestone", caller, ErrorCode.PROJECT_NOT_FOUND)

    store.project_milestones[(project_id, milestone_id)] = Milestone(
        description=description,
        target_block=target_block,
    )

    store.emit(EventType.MILESTONE_ADDED, caller, {
        "projectId": project_id,
        "milestoneId": milestone_id,
        "targetBlock": target_block,
    })
    logger.info(
        "milestone_added",
        extra={"project_id": project_id, "milestone_id": milestone_id},
    )
    return Ok(True)


def complete_project_milestone(
    store: PerformanceStore, caller: str, project_id: int, milestone_id: int
) -> ContractResult:
    """Mark a milestone completed at the current block height.

    Completion is one-way: a second call returns 406 and leaves the recorded
    completion block unchanged.
    """
    store.validator.check("complete_project_milestone", {
        "caller": caller, "project_id": project_id, "milestone_id": milestone_id,
    })
    if not is_project_manager(store, caller, project_id):
        return _reject("complete_project_milestone", caller, ErrorCode.NOT_PROJECT_MANAGER)

    key = (project_id, milestone_id)
    milestone = store.project_milestones.get(key)
    if milestone is None:
        return _reject("complete_project_milestone", caller, ErrorCode.MILESTONE_NOT_FOUND)
    if milestone.completed:
        return _reject(
            "complete_project_milestone", caller, ErrorCode.MILESTONE_ALREADY_COMPLETED
        )

    height = store.height()
    store.project_milestones[key] = Milestone(
        description=milestone.description,
        target_block=milestone.target_block,
        completed=True,
        completion_block=height,
    )

    store.emit(EventType.MILESTONE_COMPLETED, caller, {
        "projectId": project_id,
        "milestoneId": milestone_id,
        "completionBlock": height,
    })
    logger.info(
        "milestone_completed",
        extra={"project_id": project_id, "milestone_id": milestone_id, "block": height},
    )
    return Ok(True)


__all__ = [
    "get_project_count",
    "get_project",
    "is_project_manager",
    "get_performance_metric",
    "get_project_milestone",
    "register_project",
    "add_project_manager",
    "remove_project_manager",
    "record_performance_metric",
    "add_project_milestone",
    "complete_project_milestone",
]
