"""Integration tests for a full CivicLedger deployment.

Tests cover end-to-end scenarios combining:
- LedgerRuntime deployment and shared state
- Both contracts driven through one block source
- The expenditure collaborator feeding procurement verification
- The combined event trail
- Structured logging output
"""

import io
import json
import logging

import pytest

from civicledger import LedgerRuntime, performance, procurement
from civicledger.chain import ManualBlockSource
from civicledger.config import LedgerConfig
from civicledger.errors import InvalidArgumentsError, Ok
from civicledger.events import EventEmitter
from civicledger.logging_config import configure_logging, get_logger, reset_logging
from civicledger.types import ContractName, ErrorCode, EventType

ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
DEPARTMENT = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"
MANAGER = "ST3PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
VERIFIER = "ST4PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"


class TestDeployment:
    """Test runtime deployment."""

    def test_deployer_is_admin_of_both_contracts(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))

        assert runtime.performance.admin == ADMIN
        assert runtime.procurement.admin == ADMIN
        assert runtime.deployer == ADMIN

    def test_empty_deployer_rejected(self):
        with pytest.raises(ValueError):
            LedgerRuntime.deploy("")

    def test_default_block_source_is_wall_clock(self):
        """Without an explicit source, heights are positive millisecond timestamps."""
        runtime = LedgerRuntime.deploy(ADMIN)
        assert runtime.blocks.height() > 0

    def test_stores_are_isolated_between_deployments(self):
        first = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))
        second = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))

        performance.register_project(first.performance, ADMIN, "Road", DEPARTMENT, 100, 10)

        assert performance.get_project_count(first.performance) == 1
        assert performance.get_project_count(second.performance) == 0

    def test_admin_transfer_does_not_affect_performance_contract(self):
        """Each contract holds its own admin."""
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))
        procurement.transfer_admin(runtime.procurement, ADMIN, VERIFIER)

        assert runtime.procurement.admin == VERIFIER
        assert runtime.performance.admin == ADMIN


class TestProjectLifecycle:
    """Test the performance contract end to end."""

    def test_project_lifecycle(self):
        """Register, staff, measure and complete a project."""
        blocks = ManualBlockSource(1000)
        runtime = LedgerRuntime.deploy(ADMIN, block_source=blocks)
        store = runtime.performance

        result = performance.register_project(
            store, ADMIN, "Road Construction", DEPARTMENT, 1000000, 5000
        )
        assert result == Ok(True)
        assert performance.get_project(store, 0).budget == 1000000

        assert performance.add_project_manager(store, ADMIN, 0, MANAGER).ok
        assert performance.is_project_manager(store, MANAGER, 0)

        blocks.advance(10)
        assert performance.record_performance_metric(
            store, MANAGER, 0, "completion-percentage", 75
        ).ok
        metric = performance.get_performance_metric(store, 0, "completion-percentage")
        assert (metric.value, metric.recorded_by, metric.timestamp) == (75, MANAGER, 1010)

        assert performance.add_project_milestone(
            store, MANAGER, 0, 1, "Foundation complete", 2000
        ).ok
        blocks.advance(90)
        assert performance.complete_project_milestone(store, MANAGER, 0, 1).ok
        assert performance.get_project_milestone(store, 0, 1).completion_block == 1100

        second = performance.complete_project_milestone(store, MANAGER, 0, 1)
        assert second.code == ErrorCode.MILESTONE_ALREADY_COMPLETED


class TestProcurementLifecycle:
    """Test procurement verification fed by the expenditure registry."""

    def test_verify_recorded_expenditure(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(50))

        procurement.add_verifier(runtime.procurement, ADMIN, VERIFIER)
        procurement.set_procurement_rules(runtime.procurement, ADMIN, DEPARTMENT, 15000, 1)
        big = runtime.expenditures.record(DEPARTMENT, 20000, "Office equipment")
        small = runtime.expenditures.record(DEPARTMENT, 14999, "Small purchase")

        assert (big, small) == (1, 2)
        assert runtime.expenditures.get_expenditure(big).timestamp == 50

        assert procurement.verify_procurement(
            runtime.procurement, runtime.expenditures, VERIFIER, big
        ) == Ok(True)
        assert procurement.verify_procurement(
            runtime.procurement, runtime.expenditures, VERIFIER, small
        ).code == ErrorCode.BELOW_THRESHOLD
        assert procurement.verify_procurement(
            runtime.procurement, runtime.expenditures, VERIFIER, big
        ).code == ErrorCode.ALREADY_VERIFIED

    def test_config_applies_to_whole_deployment(self):
        config = LedgerConfig(default_threshold=100)
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1), config=config)
        procurement.add_verifier(runtime.procurement, ADMIN, VERIFIER)
        expenditure_id = runtime.expenditures.record(DEPARTMENT, 150, "Paint")

        assert procurement.verify_procurement(
            runtime.procurement, runtime.expenditures, VERIFIER, expenditure_id
        ).ok


class TestExpenditureRegistry:
    """Test the expenditure collaborator."""

    def test_explicit_id_cannot_be_reused(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))
        runtime.expenditures.record(DEPARTMENT, 10, "First", expenditure_id=5)

        with pytest.raises(ValueError):
            runtime.expenditures.record(DEPARTMENT, 10, "Again", expenditure_id=5)

    def test_sequential_ids_skip_explicit_ones(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))
        runtime.expenditures.record(DEPARTMENT, 10, "Explicit", expenditure_id=5)

        assert runtime.expenditures.record(DEPARTMENT, 10, "Next") == 6
        assert len(runtime.expenditures) == 2

    def test_explicit_timestamp(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))
        expenditure_id = runtime.expenditures.record(DEPARTMENT, 10, "Backdated", timestamp=0)

        assert runtime.expenditures.get_expenditure(expenditure_id).timestamp == 0

    def test_negative_amount_rejected(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))
        with pytest.raises(InvalidArgumentsError):
            runtime.expenditures.record(DEPARTMENT, -10, "Refund")

    def test_non_integer_id_rejected_without_recording(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))
        with pytest.raises(InvalidArgumentsError) as exc_info:
            runtime.expenditures.record(DEPARTMENT, 10, "Typo", expenditure_id="7")

        assert exc_info.value.errors[0].path == "expenditure_id"
        assert len(runtime.expenditures) == 0
        assert runtime.expenditures.record(DEPARTMENT, 10, "Next") == 1

    def test_negative_id_rejected(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))
        with pytest.raises(InvalidArgumentsError):
            runtime.expenditures.record(DEPARTMENT, 10, "Unverifiable", expenditure_id=-1)

        assert runtime.expenditures.get_expenditure(-1) is None
        assert len(runtime.expenditures) == 0

    def test_negative_timestamp_rejected(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))
        with pytest.raises(InvalidArgumentsError):
            runtime.expenditures.record(DEPARTMENT, 10, "Backdated", timestamp=-5)

        assert len(runtime.expenditures) == 0


class TestEventTrail:
    """Test the combined event trail."""

    def test_events_in_emission_order_across_contracts(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))
        performance.register_project(runtime.performance, ADMIN, "Road", DEPARTMENT, 100, 10)
        procurement.add_verifier(runtime.procurement, ADMIN, VERIFIER)
        runtime.expenditures.record(DEPARTMENT, 20000, "Asphalt")

        events = runtime.events()
        assert [e.type for e in events] == [
            EventType.PROJECT_REGISTERED,
            EventType.VERIFIER_ADDED,
            EventType.EXPENDITURE_RECORDED,
        ]
        assert [e.contract for e in events] == [
            ContractName.PERFORMANCE_MEASUREMENT,
            ContractName.PROCUREMENT_VERIFICATION,
            ContractName.EXPENDITURE_TRACKING,
        ]

    def test_external_emitter_receives_events(self):
        emitter = EventEmitter()
        verified = []
        emitter.on(EventType.PROCUREMENT_VERIFIED, verified.append)
        runtime = LedgerRuntime.deploy(
            ADMIN, block_source=ManualBlockSource(1), emitter=emitter
        )

        procurement.add_verifier(runtime.procurement, ADMIN, VERIFIER)
        expenditure_id = runtime.expenditures.record(DEPARTMENT, 20000, "Asphalt")
        procurement.verify_procurement(
            runtime.procurement, runtime.expenditures, VERIFIER, expenditure_id
        )

        assert len(verified) == 1
        assert verified[0].payload["expenditureId"] == expenditure_id

    def test_events_serialize_to_jsonl(self):
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(7))
        performance.register_project(runtime.performance, ADMIN, "Road", DEPARTMENT, 100, 10)

        line = runtime.events()[0].to_jsonl()
        assert json.loads(line)["block"] == 7


class TestStructuredLogging:
    """Test logging output."""

    def setup_method(self):
        reset_logging()

    def teardown_method(self):
        reset_logging()

    def test_rejection_logged_as_json(self):
        stream = io.StringIO()
        configure_logging(level=logging.INFO, stream=stream)
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1))

        performance.register_project(runtime.performance, MANAGER, "Road", DEPARTMENT, 100, 10)

        records = [json.loads(line) for line in stream.getvalue().splitlines()]
        rejected = [r for r in records if r["message"] == "call_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["level"] == "WARNING"
        assert rejected[0]["logger"] == "civicledger.performance"
        assert rejected[0]["error_code"] == 400
        assert rejected[0]["operation"] == "register_project"

    def test_configure_logging_is_idempotent(self):
        stream = io.StringIO()
        configure_logging(stream=stream)
        configure_logging(stream=stream)

        assert len(logging.getLogger("civicledger").handlers) == 1

    def test_get_logger_namespace(self):
        assert get_logger("procurement").name == "civicledger.procurement"

    def test_exception_with_non_integer_code_still_logged(self):
        stream = io.StringIO()
        configure_logging(level=logging.INFO, stream=stream)

        class ListenerFailure(Exception):
            code = "E_LISTENER"

        def failing_listener(event):
            raise ListenerFailure("listener broke")

        emitter = EventEmitter()
        emitter.on_any(failing_listener)
        runtime = LedgerRuntime.deploy(ADMIN, block_source=ManualBlockSource(1), emitter=emitter)
        procurement.add_verifier(runtime.procurement, ADMIN, VERIFIER)

        records = [json.loads(line) for line in stream.getvalue().splitlines()]
        failures = [r for r in records if r["message"] == "event_listener_failed"]
        assert len(failures) == 1
        assert failures[0]["exc_type"] == "ListenerFailure"
        assert failures[0]["exc_code"] == "E_LISTENER"
