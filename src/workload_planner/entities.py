"""
Hand edits to a single plan: members, periods, work logs, leave and settings.

Every function takes a Plan, changes it in place and returns what it touched.
Members and periods are addressed by name, work logs by id. Callers load the
plan inside a store session and save it back with store.save_plan().

Deleting a member or a period also deletes the work logs that point at it, so
a plan never holds a log with a dangling reference.
"""

import logging
from typing import Optional
from workload_planner import constants
from workload_planner.csv_io import is_valid_date
from workload_planner.errors import DuplicateNameError, EntityNotFoundError, InvalidValueError
from workload_planner.holidays import calculate_working_days
from workload_planner.models import Member, Period, WorkLog, WorkType, new_id

logger = logging.getLogger(__name__)


def _clean_name(kind: str, name: str) -> str:
	name = (name or "").strip()
	if not name:
		raise InvalidValueError(f"{kind} name must not be empty")
	return name


def _percentage(field: str, value) -> float:
	if not 0 <= value <= 100:
		raise InvalidValueError(f"{field} must be between 0 and 100, got {value}")
	return value


def _hours(value) -> float:
	if value < 0:
		raise InvalidValueError(f"hours must be non-negative, got {value}")
	return value


def _work_type(value) -> WorkType:
	if isinstance(value, WorkType):
		return value
	try:
		return WorkType((value or "").strip().lower())
	except ValueError:
		raise InvalidValueError(f"work type must be one of project, feature, leave, got \"{value}\"") from None


def _date(field: str, value: str) -> str:
	value = (value or "").strip()
	if not is_valid_date(value):
		raise InvalidValueError(f"{field} must be YYYY-MM-DD, got \"{value}\"")
	return value


def _by_name(entities, kind: str, name: str):
	for entity in entities:
		if entity.name == name:
			return entity
	raise EntityNotFoundError(kind, name)


def find_member(plan, name: str) -> Member:
	return _by_name(plan.members, "member", name)


def find_period(plan, name: str) -> Period:
	return _by_name(plan.periods, "period", name)


def find_work_log(plan, log_id: str) -> WorkLog:
	for log in plan.work_logs:
		if log.id == log_id:
			return log
	raise EntityNotFoundError("work log", log_id)


def _check_unique(entities, kind: str, name: str, current=None) -> None:
	for entity in entities:
		if entity.name == name and entity is not current:
			raise DuplicateNameError(kind, name)


# -- Members --

def add_member(plan, name: str, buffer=None, project_ratio=None, feature_ratio=None) -> Member:
	name = _clean_name("member", name)
	_check_unique(plan.members, "member", name)

	member = Member.create(name)
	if buffer is not None:
		member.buffer = _percentage("buffer", buffer)
	if project_ratio is not None:
		member.project_ratio = _percentage("projectRatio", project_ratio)
	if feature_ratio is not None:
		member.feature_ratio = _percentage("featureRatio", feature_ratio)
	plan.members.append(member)
	return member


def update_member(plan, name: str, new_name=None, buffer=None, project_ratio=None, feature_ratio=None) -> Member:
	member = find_member(plan, name)
	if new_name is not None:
		new_name = _clean_name("member", new_name)
		_check_unique(plan.members, "member", new_name, current=member)
		member.name = new_name
	if buffer is not None:
		member.buffer = _percentage("buffer", buffer)
	if project_ratio is not None:
		member.project_ratio = _percentage("projectRatio", project_ratio)
	if feature_ratio is not None:
		member.feature_ratio = _percentage("featureRatio", feature_ratio)
	return member


def delete_member(plan, name: str) -> int:
	"""Remove the member and its work logs. Returns the number of logs removed."""
	member = find_member(plan, name)
	plan.members = [m for m in plan.members if m.id != member.id]
	before = len(plan.work_logs)
	plan.work_logs = [log for log in plan.work_logs if log.member_id != member.id]
	removed = before - len(plan.work_logs)
	logger.info(f"Deleted member '{member.name}' and {removed} work logs")
	return removed


# -- Periods --

def add_period(plan, name: str, start_date: str, end_date: str, holidays: Optional[dict] = None) -> Period:
	name = _clean_name("period", name)
	_check_unique(plan.periods, "period", name)
	start_date = _date("startDate", start_date)
	end_date = _date("endDate", end_date)

	period = Period(
		id=new_id(),
		name=name,
		start_date=start_date,
		end_date=end_date,
		working_days=calculate_working_days(start_date, end_date, holidays or {}, plan.settings),
	)
	plan.periods.append(period)
	return period


def update_period(plan, name: str, new_name=None, start_date=None, end_date=None, holidays: Optional[dict] = None) -> Period:
	"""Rename or re-date a period. Working days are recomputed when a date changes."""
	period = find_period(plan, name)
	if new_name is not None:
		new_name = _clean_name("period", new_name)
		_check_unique(plan.periods, "period", new_name, current=period)
		period.name = new_name

	if start_date is not None or end_date is not None:
		if start_date is not None:
			period.start_date = _date("startDate", start_date)
		if end_date is not None:
			period.end_date = _date("endDate", end_date)
		period.working_days = calculate_working_days(period.start_date, period.end_date, holidays or {}, plan.settings)
	return period


def delete_period(plan, name: str) -> int:
	"""Remove the period and its work logs. Returns the number of logs removed."""
	period = find_period(plan, name)
	plan.periods = [p for p in plan.periods if p.id != period.id]
	before = len(plan.work_logs)
	plan.work_logs = [log for log in plan.work_logs if log.period_id != period.id]
	removed = before - len(plan.work_logs)
	logger.info(f"Deleted period '{period.name}' and {removed} work logs")
	return removed


def recalculate_working_days(plan, holidays: dict) -> None:
	for period in plan.periods:
		period.working_days = calculate_working_days(period.start_date, period.end_date, holidays or {}, plan.settings)


# -- Work logs --

def add_work_log(plan, member_name: str, period_name: str, work_type, task_name: str, hours) -> WorkLog:
	member = find_member(plan, member_name)
	period = find_period(plan, period_name)
	log = WorkLog(
		id=new_id(),
		member_id=member.id,
		period_id=period.id,
		type=_work_type(work_type),
		task_name=(task_name or "").strip(),
		hours=_hours(hours),
	)
	plan.work_logs.append(log)
	return log


def update_work_log(plan, log_id: str, hours=None, task_name=None, work_type=None) -> WorkLog:
	log = find_work_log(plan, log_id)
	if hours is not None:
		log.hours = _hours(hours)
	if task_name is not None:
		log.task_name = task_name.strip()
	if work_type is not None:
		log.type = _work_type(work_type)
	return log


def delete_work_log(plan, log_id: str) -> WorkLog:
	log = find_work_log(plan, log_id)
	plan.work_logs = [l for l in plan.work_logs if l.id != log_id]
	return log


def member_hours(plan, member_id: str, period_id: str, work_type=None) -> float:
	"""Total hours a member has logged in a period, optionally for one work type."""
	return sum(
		log.hours for log in plan.work_logs
		if log.member_id == member_id and log.period_id == period_id
		and (work_type is None or log.type == work_type)
	)


def set_leave(plan, member_name: str, period_name: str, hours) -> Optional[WorkLog]:
	"""
	Set a member's leave hours for a period.

	A cell holds at most one leave log: the first one is updated and any others
	are removed. Zero hours removes the leave entirely and returns None.
	"""
	hours = _hours(hours)
	member = find_member(plan, member_name)
	period = find_period(plan, period_name)

	def is_cell_leave(log):
		return log.member_id == member.id and log.period_id == period.id and log.type == WorkType.LEAVE

	existing = next((log for log in plan.work_logs if is_cell_leave(log)), None)
	plan.work_logs = [log for log in plan.work_logs if not is_cell_leave(log) or log is existing]

	if hours == 0:
		if existing is not None:
			plan.work_logs.remove(existing)
		return None

	if existing is not None:
		existing.hours = hours
		return existing

	log = WorkLog(
		id=new_id(),
		member_id=member.id,
		period_id=period.id,
		type=WorkType.LEAVE,
		task_name=constants.LEAVE_TASK_NAME,
		hours=hours,
	)
	plan.work_logs.append(log)
	return log


# -- Settings --

def update_settings(plan, default_daily_hours=None, consider_public_holidays=None, add_holidays=(), remove_holidays=()):
	"""
	Change plan settings. Company holidays are kept sorted and unique.
	Working days are not recomputed here; see recalculate_working_days().
	"""
	settings = plan.settings
	if default_daily_hours is not None:
		if not 0 < default_daily_hours <= 24:
			raise InvalidValueError(f"defaultDailyHours must be between 0 and 24, got {default_daily_hours}")
		settings.default_daily_hours = default_daily_hours
	if consider_public_holidays is not None:
		settings.consider_public_holidays = bool(consider_public_holidays)

	holidays = set(settings.company_holidays)
	holidays.update(_date("company holiday", day) for day in add_holidays)
	holidays.difference_update(day.strip() for day in remove_holidays)
	settings.company_holidays = sorted(holidays)
	return settings
