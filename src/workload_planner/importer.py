"""
Import workflows shared by the CLI and the web app.

Staging flow:  stage_periods / stage_workload write a pending payload for a plan
               (or the global bucket); apply_staging later merges it into the
               live plan and clears it.
Direct flow:   import_periods / import_workload merge into the live plan at once.

Every workflow is one read-modify-write of the document store. Parsing and the
holiday lookup happen before the store is read; errors are raised before
anything is written.
"""

import logging
from typing import Callable, Optional
from workload_planner import csv_io
from workload_planner.converter import build_periods, convert_rows_to_work_logs, make_member_resolver
from workload_planner.errors import MissingPrerequisiteError
from workload_planner.holidays import fetch_holidays
from workload_planner.merge import MergeReport, merge_by_name, merge_staging_with_report
from workload_planner.models import StagingPayload
from workload_planner.staging import ClearTarget, clear_in_document, describe_key, load_from_document, save_to_document
from workload_planner.store import ensure_plan, save_plan

logger = logging.getLogger(__name__)


def load_holidays(holiday_source: Callable[[], dict]) -> dict:
	"""Call the holiday source; a failing source means "no holidays", not a failed import."""
	try:
		return holiday_source() or {}
	except Exception as e:
		logger.warning(f"Holiday lookup failed, treating all days as non-holidays: {e}")
		return {}


def _parse_periods_with_holidays(text: str, holiday_source) -> tuple:
	"""Parse and look up holidays before any store session is opened."""
	rows = csv_io.parse_period_csv(text)
	return rows, load_holidays(holiday_source)


def _replace_content_keys(existing: list, incoming: list) -> list:
	"""existing logs minus those sharing a content key with incoming, followed by incoming."""
	incoming_keys = {log.content_key for log in incoming}
	return [log for log in existing if log.content_key not in incoming_keys] + incoming


def stage_periods(store, text: str, plan_name: Optional[str] = None, holiday_source=fetch_holidays) -> list:
	"""
	Parse a period CSV and stage the periods for plan_name (or the global bucket).

	Periods already staged under the same key are kept unless a new period has
	the same name, in which case the new one replaces it. Staged members and
	work logs are carried over untouched.
	"""
	rows, holidays = _parse_periods_with_holidays(text, holiday_source)
	with store.session() as document:
		plan = ensure_plan(document, plan_name)
		new_periods = build_periods(rows, holidays, plan.settings)

		payload = load_from_document(document, plan_name) or StagingPayload()
		new_names = {p.name for p in new_periods}
		kept = [p for p in payload.periods if p.name not in new_names]
		payload.periods = kept + new_periods
		save_to_document(document, payload, plan_name)

	logger.info(f"Staged {len(new_periods)} periods for {describe_key(plan_name)}")
	return new_periods


def stage_workload(store, text: str, plan_name: Optional[str] = None) -> list:
	"""
	Parse a workload CSV and stage its work logs for plan_name (or the global bucket).

	Hour columns map onto the periods known at this point: the live plan's
	periods followed by staged periods with new names. Members are resolved
	against live and staged members by name; unknown names become new staged
	members.

	Raises:
		MissingPrerequisiteError: no live or staged periods exist
	"""
	with store.session() as document:
		plan = ensure_plan(document, plan_name)
		payload = load_from_document(document, plan_name) or StagingPayload()

		periods = merge_by_name(plan.periods, payload.periods)
		if not periods:
			raise MissingPrerequisiteError()

		rows = csv_io.parse_workload_csv(text)

		known_members = merge_by_name(plan.members, payload.members)
		# names missing from both live and staged members become new staged members
		staged_members = list(payload.members)
		resolver = make_member_resolver(staged_members)
		work_logs = convert_rows_to_work_logs(rows, periods, known_members, resolver)

		payload.members = staged_members
		payload.work_logs = _replace_content_keys(payload.work_logs, work_logs)
		save_to_document(document, payload, plan_name)

	logger.info(f"Staged {len(work_logs)} work logs for {describe_key(plan_name)}")
	return work_logs


def apply_staging(store, plan_name: Optional[str] = None) -> MergeReport:
	"""
	Merge the pending payload for plan_name (or the global bucket) into the live
	plan and clear it. With nothing pending this is a no-op.

	The global bucket merges into the active plan; a plan name merges into the
	plan with that name, created if it does not exist yet.
	"""
	with store.session() as document:
		payload = load_from_document(document, plan_name)
		if payload is None:
			logger.info(f"Nothing staged for {describe_key(plan_name)}")
			return MergeReport()

		plan = ensure_plan(document, plan_name)
		merged, report = merge_staging_with_report(plan, payload)
		save_plan(document, merged)

		if plan_name:
			clear_in_document(document, ClearTarget.PLAN, plan_name)
		else:
			clear_in_document(document, ClearTarget.GLOBAL)

	return report


def import_periods(store, text: str, holiday_source=fetch_holidays) -> MergeReport:
	"""Import periods straight into the active plan (created if missing)."""
	rows, holidays = _parse_periods_with_holidays(text, holiday_source)
	with store.session() as document:
		plan = ensure_plan(document)
		payload = StagingPayload(periods=build_periods(rows, holidays, plan.settings))
		merged, report = merge_staging_with_report(plan, payload)
		save_plan(document, merged)

	logger.info(f"Imported {report.periods_added} periods into plan '{merged.name}'")
	return report


def import_workload(store, text: str) -> MergeReport:
	"""
	Import a workload CSV straight into the active plan.

	Raises:
		MissingPrerequisiteError: the active plan has no periods
	"""
	with store.session() as document:
		plan = ensure_plan(document)
		if not plan.periods:
			raise MissingPrerequisiteError()

		rows = csv_io.parse_workload_csv(text)
		new_members = []
		work_logs = convert_rows_to_work_logs(rows, plan.periods, plan.members, make_member_resolver(new_members))
		payload = StagingPayload(members=new_members, work_logs=work_logs)
		merged, report = merge_staging_with_report(plan, payload)
		save_plan(document, merged)

	logger.info(f"Imported {report.work_logs_added} work logs into plan '{merged.name}'")
	return report
