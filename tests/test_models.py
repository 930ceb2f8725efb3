import pytest
from workload_planner.models import Member, Plan, Settings, StagingPayload, WorkLog, WorkType
from tests.fixtures.builders import make_log, make_member, make_period


@pytest.mark.unit
class TestWorkType:

	@pytest.mark.parametrize("label, expected", [
		("project", WorkType.PROJECT),
		(" Project ", WorkType.PROJECT),
		("プロジェクト", WorkType.PROJECT),
		("FEATURE", WorkType.FEATURE),
		("フィーチャー", WorkType.FEATURE),
		("機能", WorkType.FEATURE),
	])
	def test_known_labels(self, label, expected):
		assert WorkType.from_label(label) is expected

	@pytest.mark.parametrize("label", ["", None, "leave", "bug"])
	def test_unknown_labels(self, label):
		assert WorkType.from_label(label) is None


@pytest.mark.unit
class TestMember:

	def test_create_uses_defaults_and_fresh_id(self):
		a, b = Member.create("Alice"), Member.create("Alice")
		assert a.id != b.id
		assert (a.buffer, a.project_ratio, a.feature_ratio) == (5, 50, 50)

	def test_from_dict_fills_missing_defaults(self):
		member = Member.from_dict({"id": 7, "name": "Bob"})
		assert member.id == "7"
		assert member.buffer == 5

	def test_dict_uses_camel_case(self):
		assert make_member("M1", "Alice").to_dict()["projectRatio"] == 50


@pytest.mark.unit
class TestWorkLog:

	def test_type_string_is_coerced(self):
		log = WorkLog(id="L", member_id="M", period_id="P", type="feature", task_name="t", hours=1)
		assert log.type is WorkType.FEATURE

	def test_negative_hours_rejected(self):
		with pytest.raises(ValueError):
			make_log("L", "M", "P", hours=-1)

	def test_content_key_ignores_id_and_hours(self):
		a = make_log("L1", "M", "P", hours=1)
		b = make_log("L2", "M", "P", hours=8)
		assert a.content_key == b.content_key
		assert make_log("L3", "M", "P", type=WorkType.LEAVE).content_key != a.content_key

	def test_dict_round_trip(self):
		log = make_log("L1", "M", "P", type=WorkType.LEAVE, hours=7.5)
		data = log.to_dict()
		assert data["type"] == "leave"
		assert data["memberId"] == "M"
		assert WorkLog.from_dict(data) == log


@pytest.mark.unit
class TestPlan:

	def test_create_default_name(self):
		plan = Plan.create()
		assert plan.name == "Default Plan"
		assert plan.settings == Settings()

	def test_from_dict_tolerates_missing_collections(self):
		plan = Plan.from_dict({"id": "p", "name": "Team"})
		assert plan.members == [] and plan.periods == [] and plan.work_logs == []
		assert plan.settings.consider_public_holidays is True

	def test_copy_is_deep(self, live_plan):
		clone = live_plan.copy()
		clone.members[0].name = "Changed"
		clone.work_logs.clear()
		assert live_plan.members[0].name == "Alice"
		assert len(live_plan.work_logs) == 1

	def test_to_dict_then_from_dict(self, live_plan):
		assert Plan.from_dict(live_plan.to_dict()) == live_plan


@pytest.mark.unit
class TestStagingPayload:

	def test_is_empty(self):
		assert StagingPayload().is_empty()
		assert not StagingPayload(periods=[make_period("P1", "W1")]).is_empty()

	def test_from_dict_none(self):
		assert StagingPayload.from_dict(None).is_empty()
