"""Builders for domain objects with fixed, readable ids.

Tests refer to entities by these ids ("A", "P1", ...) so that id remapping
during merges can be asserted directly.
"""

from workload_planner.models import Member, Period, WorkLog, WorkType


def make_member(id, name, **kwargs):
	return Member(id=id, name=name, **kwargs)


def make_period(id, name, start_date="2025-01-06", end_date="2025-01-10", working_days=5):
	return Period(id=id, name=name, start_date=start_date, end_date=end_date, working_days=working_days)


def make_log(id, member_id, period_id, task_name="Alpha - Design", hours=4, type=WorkType.PROJECT):
	return WorkLog(id=id, member_id=member_id, period_id=period_id, type=type, task_name=task_name, hours=hours)
