"""Test suite for the CivicLedger contracts.

This package contains tests for:
- Performance measurement contract (projects, managers, metrics, milestones)
- Procurement verification contract (verifiers, rules, verification, admin)
- Argument validation, events, config and block sources
- Integration scenarios across a full deployment
"""
