"""Test fixtures and configuration for the workload_planner test suite.

- store: an isolated JsonDocumentStore under tmp_path
- plan/payload builders with deterministic ids so assertions can name them
- no_holidays: a holiday source that never touches the network
"""

import pytest
from workload_planner.logging_config import cleanup_test_logs
from workload_planner.models import Plan, Settings, StagingPayload
from workload_planner.store import JsonDocumentStore
from tests.fixtures.builders import make_log, make_member, make_period


def pytest_sessionfinish(session, exitstatus):
	cleanup_test_logs()


@pytest.fixture
def store(tmp_path):
	return JsonDocumentStore(tmp_path / "data" / "db.json")


@pytest.fixture
def no_holidays():
	return lambda: {}


@pytest.fixture
def live_plan():
	"""Alice and Bob over two periods, one project log for Alice in P1."""
	return Plan(
		id="plan-1",
		name="Team A",
		members=[make_member("A", "Alice"), make_member("B", "Bob")],
		periods=[make_period("P1", "Sprint 1"), make_period("P2", "Sprint 2", "2025-01-13", "2025-01-17")],
		work_logs=[make_log("L1", "A", "P1", hours=5)],
		settings=Settings(),
	)


@pytest.fixture
def seeded_store(store, live_plan):
	"""Store whose only (active) plan is live_plan."""
	store.write({"plans": [live_plan.to_dict()], "activePlanId": live_plan.id})
	return store


@pytest.fixture
def payload_factory():
	def _build(periods=None, members=None, work_logs=None):
		return StagingPayload(periods=periods or [], members=members or [], work_logs=work_logs or [])
	return _build
