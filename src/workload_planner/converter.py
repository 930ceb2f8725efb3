"""
Convert parsed CSV rows into domain records (Period, Member, WorkLog).

Member identity is resolved through a caller-supplied strategy,
resolve_or_create_member(name) -> Member, so the caller decides whether
"known members" means the live plan, the staged payload, or both.
"""

import logging
from typing import Callable
from workload_planner.holidays import calculate_working_days
from workload_planner.models import Member, Period, WorkLog, WorkType, new_id

logger = logging.getLogger(__name__)


def normalize_work_type(label: str) -> WorkType:
	"""Unrecognized labels fall back to PROJECT (logged, not an error)."""
	work_type = WorkType.from_label(label)
	if work_type is None:
		logger.warning(f"Unknown work type '{label}', treating as {WorkType.PROJECT.value}")
		return WorkType.PROJECT
	return work_type


def make_member_resolver(members: list) -> Callable[[str], Member]:
	"""
	Default resolution strategy: return the member with that name from `members`,
	otherwise create one with default buffer/ratios and append it to `members`.
	"""
	by_name = {m.name: m for m in members}

	def resolve_or_create_member(name: str) -> Member:
		member = by_name.get(name)
		if member is None:
			member = Member.create(name)
			members.append(member)
			by_name[name] = member
			logger.info(f"Created member '{name}' ({member.id})")
		return member

	return resolve_or_create_member


def convert_rows_to_work_logs(rows, periods, members, resolve_or_create_member) -> list:
	"""
	Turn workload rows into WorkLogs.

	Hour column i maps to periods[i]. Values <= 0 produce nothing; columns past
	the last known period are skipped with a warning. Each distinct member name
	is resolved once per call.
	"""
	work_logs = []
	member_ids = {m.name: m.id for m in members}

	for row in rows:
		member_id = member_ids.get(row.member_name)
		if member_id is None:
			member_id = resolve_or_create_member(row.member_name).id
			member_ids[row.member_name] = member_id

		work_type = normalize_work_type(row.work_type)
		task_name = f"{row.project_name} - {row.task_name}"

		for index, hours in enumerate(row.hours):
			if hours <= 0:
				continue
			if index >= len(periods):
				logger.warning(
					f"Hours column {index + 1} for '{row.member_name}' / '{task_name}' has no matching period "
					f"({len(periods)} known), skipping"
				)
				continue

			work_logs.append(WorkLog(
				id=new_id(),
				member_id=member_id,
				period_id=periods[index].id,
				type=work_type,
				task_name=task_name,
				hours=hours,
			))

	logger.debug(f"Converted {len(rows)} rows into {len(work_logs)} work logs")
	return work_logs


def build_periods(period_rows, holidays: dict, settings) -> list:
	"""Give parsed period rows fresh ids and computed working days."""
	return [
		Period(
			id=new_id(),
			name=row.name,
			start_date=row.start_date,
			end_date=row.end_date,
			working_days=calculate_working_days(row.start_date, row.end_date, holidays, settings),
		)
		for row in period_rows
	]
