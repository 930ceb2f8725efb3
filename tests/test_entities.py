import pytest
from workload_planner import entities
from workload_planner.errors import DuplicateNameError, EntityNotFoundError, InvalidValueError
from workload_planner.models import WorkType
from tests.fixtures.builders import make_log


def _assert_references_resolve(plan):
	member_ids = {m.id for m in plan.members}
	period_ids = {p.id for p in plan.periods}
	for log in plan.work_logs:
		assert log.member_id in member_ids
		assert log.period_id in period_ids


@pytest.mark.unit
class TestMembers:

	def test_add_member_with_defaults(self, live_plan):
		member = entities.add_member(live_plan, "  Carol ")
		assert member.name == "Carol"
		assert (member.buffer, member.project_ratio, member.feature_ratio) == (5, 50, 50)
		assert live_plan.members[-1] is member

	def test_add_member_with_ratios(self, live_plan):
		member = entities.add_member(live_plan, "Carol", buffer=10, project_ratio=70, feature_ratio=30)
		assert (member.buffer, member.project_ratio, member.feature_ratio) == (10, 70, 30)

	def test_duplicate_name_rejected(self, live_plan):
		with pytest.raises(DuplicateNameError):
			entities.add_member(live_plan, "Alice")

	@pytest.mark.parametrize("kwargs", [{"buffer": -1}, {"project_ratio": 101}, {"feature_ratio": 150}])
	def test_out_of_range_percentages_rejected(self, live_plan, kwargs):
		with pytest.raises(InvalidValueError):
			entities.add_member(live_plan, "Carol", **kwargs)

	def test_blank_name_rejected(self, live_plan):
		with pytest.raises(InvalidValueError):
			entities.add_member(live_plan, "   ")

	def test_update_member(self, live_plan):
		member = entities.update_member(live_plan, "Alice", new_name="Alicia", buffer=20)
		assert member.id == "A"
		assert (member.name, member.buffer, member.project_ratio) == ("Alicia", 20, 50)

	def test_update_member_to_taken_name_rejected(self, live_plan):
		with pytest.raises(DuplicateNameError):
			entities.update_member(live_plan, "Alice", new_name="Bob")

	def test_update_member_keeping_own_name(self, live_plan):
		assert entities.update_member(live_plan, "Alice", new_name="Alice").name == "Alice"

	def test_unknown_member(self, live_plan):
		with pytest.raises(EntityNotFoundError):
			entities.update_member(live_plan, "Zed", buffer=1)

	def test_delete_member_removes_its_logs(self, live_plan):
		live_plan.work_logs.append(make_log("L2", "B", "P2", hours=2))
		removed = entities.delete_member(live_plan, "Alice")
		assert removed == 1
		assert [m.id for m in live_plan.members] == ["B"]
		assert [l.id for l in live_plan.work_logs] == ["L2"]
		_assert_references_resolve(live_plan)


@pytest.mark.unit
class TestPeriods:

	def test_add_period_computes_working_days(self, live_plan):
		period = entities.add_period(live_plan, "Sprint 3", "2025-01-20", "2025-01-26", {"2025-01-21": "Holiday"})
		assert period.working_days == 4
		assert live_plan.periods[-1] is period

	def test_add_period_respects_company_holidays(self, live_plan):
		live_plan.settings.company_holidays = ["2025-01-22"]
		assert entities.add_period(live_plan, "Sprint 3", "2025-01-20", "2025-01-24").working_days == 4

	def test_add_period_invalid_date(self, live_plan):
		with pytest.raises(InvalidValueError):
			entities.add_period(live_plan, "Sprint 3", "2025/01/20", "2025-01-24")

	def test_add_period_duplicate_name(self, live_plan):
		with pytest.raises(DuplicateNameError):
			entities.add_period(live_plan, "Sprint 1", "2025-01-20", "2025-01-24")

	def test_update_period_dates_recomputes_working_days(self, live_plan):
		period = entities.update_period(live_plan, "Sprint 1", end_date="2025-01-08")
		assert (period.start_date, period.end_date, period.working_days) == ("2025-01-06", "2025-01-08", 3)

	def test_rename_period_keeps_working_days(self, live_plan):
		period = entities.update_period(live_plan, "Sprint 1", new_name="Kickoff")
		assert (period.id, period.name, period.working_days) == ("P1", "Kickoff", 5)

	def test_delete_period_removes_its_logs(self, live_plan):
		live_plan.work_logs.append(make_log("L2", "B", "P2", hours=2))
		assert entities.delete_period(live_plan, "Sprint 1") == 1
		assert [p.id for p in live_plan.periods] == ["P2"]
		assert [l.id for l in live_plan.work_logs] == ["L2"]
		_assert_references_resolve(live_plan)

	def test_recalculate_working_days(self, live_plan):
		live_plan.settings.consider_public_holidays = True
		entities.recalculate_working_days(live_plan, {"2025-01-13": "Holiday"})
		assert [p.working_days for p in live_plan.periods] == [5, 4]


@pytest.mark.unit
class TestWorkLogs:

	def test_add_work_log(self, live_plan):
		log = entities.add_work_log(live_plan, "Bob", "Sprint 2", "feature", " Beta - Build ", 3)
		assert (log.member_id, log.period_id, log.type, log.task_name, log.hours) == ("B", "P2", WorkType.FEATURE, "Beta - Build", 3)

	def test_add_work_log_unknown_period(self, live_plan):
		with pytest.raises(EntityNotFoundError):
			entities.add_work_log(live_plan, "Bob", "Sprint 9", "project", "x", 1)

	def test_add_work_log_bad_type(self, live_plan):
		with pytest.raises(InvalidValueError):
			entities.add_work_log(live_plan, "Bob", "Sprint 1", "meeting", "x", 1)

	def test_add_work_log_negative_hours(self, live_plan):
		with pytest.raises(InvalidValueError):
			entities.add_work_log(live_plan, "Bob", "Sprint 1", "project", "x", -2)

	def test_update_work_log(self, live_plan):
		log = entities.update_work_log(live_plan, "L1", hours=7, work_type="feature")
		assert (log.hours, log.type, log.task_name) == (7, WorkType.FEATURE, "Alpha - Design")

	def test_delete_work_log(self, live_plan):
		entities.delete_work_log(live_plan, "L1")
		assert live_plan.work_logs == []
		with pytest.raises(EntityNotFoundError):
			entities.delete_work_log(live_plan, "L1")

	def test_member_hours(self, live_plan):
		live_plan.work_logs.append(make_log("L2", "A", "P1", "Beta - Build", 2, type=WorkType.FEATURE))
		assert entities.member_hours(live_plan, "A", "P1") == 7
		assert entities.member_hours(live_plan, "A", "P1", WorkType.FEATURE) == 2
		assert entities.member_hours(live_plan, "B", "P1") == 0


@pytest.mark.unit
class TestLeave:

	def _leave(self, plan):
		return [l for l in plan.work_logs if l.type == WorkType.LEAVE]

	def test_set_leave_creates_time_off_log(self, live_plan):
		log = entities.set_leave(live_plan, "Bob", "Sprint 1", 7.5)
		assert (log.member_id, log.period_id, log.task_name, log.hours) == ("B", "P1", "Time Off", 7.5)
		assert self._leave(live_plan) == [log]

	def test_set_leave_updates_existing(self, live_plan):
		first = entities.set_leave(live_plan, "Bob", "Sprint 1", 4)
		second = entities.set_leave(live_plan, "Bob", "Sprint 1", 8)
		assert second.id == first.id
		assert [l.hours for l in self._leave(live_plan)] == [8]

	def test_set_leave_collapses_extra_leave_logs(self, live_plan):
		live_plan.work_logs.append(make_log("V1", "B", "P1", "Vacation", 2, type=WorkType.LEAVE))
		live_plan.work_logs.append(make_log("V2", "B", "P1", "Sick", 3, type=WorkType.LEAVE))
		entities.set_leave(live_plan, "Bob", "Sprint 1", 6)
		assert [(l.id, l.hours) for l in self._leave(live_plan)] == [("V1", 6)]

	def test_zero_hours_clears_leave(self, live_plan):
		entities.set_leave(live_plan, "Bob", "Sprint 1", 4)
		assert entities.set_leave(live_plan, "Bob", "Sprint 1", 0) is None
		assert self._leave(live_plan) == []
		assert [l.id for l in live_plan.work_logs] == ["L1"]

	def test_leave_leaves_project_work_alone(self, live_plan):
		entities.set_leave(live_plan, "Alice", "Sprint 1", 2)
		assert entities.member_hours(live_plan, "A", "P1", WorkType.PROJECT) == 5

	def test_negative_leave_rejected(self, live_plan):
		with pytest.raises(InvalidValueError):
			entities.set_leave(live_plan, "Bob", "Sprint 1", -1)


@pytest.mark.unit
class TestSettings:

	def test_update_settings(self, live_plan):
		settings = entities.update_settings(
			live_plan,
			default_daily_hours=8,
			consider_public_holidays=False,
			add_holidays=["2025-12-31", "2025-12-29", "2025-12-31"],
		)
		assert settings.default_daily_hours == 8
		assert settings.consider_public_holidays is False
		assert settings.company_holidays == ["2025-12-29", "2025-12-31"]

	def test_remove_company_holiday(self, live_plan):
		live_plan.settings.company_holidays = ["2025-12-29", "2025-12-31"]
		entities.update_settings(live_plan, remove_holidays=["2025-12-29", "2026-01-01"])
		assert live_plan.settings.company_holidays == ["2025-12-31"]

	def test_invalid_values_rejected(self, live_plan):
		with pytest.raises(InvalidValueError):
			entities.update_settings(live_plan, default_daily_hours=0)
		with pytest.raises(InvalidValueError):
			entities.update_settings(live_plan, add_holidays=["someday"])
