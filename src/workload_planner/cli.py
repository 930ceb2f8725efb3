import argparse
import os
import sys
from workload_planner import constants, csv_io, entities, importer
from workload_planner.errors import CorruptStoreError, ImportFailure
from workload_planner.holidays import fetch_holidays
from workload_planner.logging_config import get_logger
from workload_planner.staging import StagingStore, describe_key
from workload_planner.store import (
	JsonDocumentStore,
	add_plan,
	delete_plan,
	edit_plan,
	ensure_plan,
	get_active_plan,
	list_plans,
	rename_plan,
	switch_plan,
)


def _read_input(path, logger):
	if not os.path.exists(path):
		logger.error(f"File not found: {os.path.abspath(path)}")
		return None
	return csv_io.read_csv_text(path)


def export_summary(store, kind, output, logger) -> bool:
	plan = get_active_plan(store.read())
	if plan is None or not plan.members or not plan.periods:
		logger.error("Active plan has no members or periods to export")
		return False

	if kind == "leaves":
		content = csv_io.generate_leaves_summary_csv(plan.members, plan.periods, plan.work_logs)
	else:
		content = csv_io.generate_workload_summary_csv(plan.members, plan.periods, plan.work_logs)
	csv_io.write_export_csv(content, output)
	return True


def show_status(store, logger) -> None:
	document = store.read()
	plan = get_active_plan(document)
	if plan is None:
		logger.info("No plans yet")
	else:
		logger.info(
			f"Active plan '{plan.name}': {len(plan.members)} members, "
			f"{len(plan.periods)} periods, {len(plan.work_logs)} work logs"
		)

	staging = StagingStore(store)
	pending = staging.pending()
	if not pending:
		logger.info("No staged imports pending")
	for plan_name in pending:
		payload = staging.load(plan_name)
		logger.info(
			f"Pending for {describe_key(plan_name)}: {len(payload.periods)} periods, "
			f"{len(payload.members)} members, {len(payload.work_logs)} work logs"
		)


def run_plan_command(args, store, logger) -> None:
	if args.plan_command == "list":
		document = store.read()
		active = get_active_plan(document)
		plans = list_plans(document)
		if not plans:
			logger.info("No plans yet")
		for plan in plans:
			marker = "*" if active is not None and plan.id == active.id else " "
			logger.info(f"{marker} {plan.name}: {len(plan.members)} members, {len(plan.periods)} periods")
		return

	with store.session() as document:
		if args.plan_command == "create":
			plan = add_plan(document, args.name)
			logger.info(f"Created and switched to plan '{plan.name}'")
		elif args.plan_command == "rename":
			rename_plan(document, args.name, args.new_name)
			logger.info(f"Renamed plan '{args.name}' to '{args.new_name}'")
		elif args.plan_command == "switch":
			switch_plan(document, args.name)
			logger.info(f"Active plan is now '{args.name}'")
		elif args.plan_command == "delete":
			delete_plan(document, args.name)
			active = get_active_plan(document)
			logger.info(f"Deleted plan '{args.name}'; active plan: {active.name if active else 'none'}")


def run_member_command(args, store, logger) -> None:
	with edit_plan(store, args.plan) as plan:
		if args.member_command == "add":
			member = entities.add_member(plan, args.name, args.buffer, args.project_ratio, args.feature_ratio)
			logger.info(f"Added member '{member.name}' to plan '{plan.name}'")
		elif args.member_command == "update":
			member = entities.update_member(plan, args.name, args.new_name, args.buffer, args.project_ratio, args.feature_ratio)
			logger.info(
				f"Member '{member.name}': buffer {member.buffer}, "
				f"project {member.project_ratio}, feature {member.feature_ratio}"
			)
		elif args.member_command == "delete":
			removed = entities.delete_member(plan, args.name)
			logger.info(f"Deleted member '{args.name}' and {removed} work logs")


def run_period_command(args, store, logger) -> None:
	# holidays are looked up before the store session is opened
	holidays = importer.load_holidays(fetch_holidays) if args.period_command in ("add", "update") else {}
	with edit_plan(store, args.plan) as plan:
		if args.period_command == "add":
			period = entities.add_period(plan, args.name, args.start_date, args.end_date, holidays)
			logger.info(f"Added period '{period.name}' ({period.working_days} working days)")
		elif args.period_command == "update":
			period = entities.update_period(plan, args.name, args.new_name, args.start_date, args.end_date, holidays)
			logger.info(f"Period '{period.name}': {period.start_date}..{period.end_date}, {period.working_days} working days")
		elif args.period_command == "delete":
			removed = entities.delete_period(plan, args.name)
			logger.info(f"Deleted period '{args.name}' and {removed} work logs")


def run_log_command(args, store, logger) -> None:
	with edit_plan(store, args.plan) as plan:
		if args.log_command == "add":
			log = entities.add_work_log(plan, args.member, args.period, args.type, args.task, args.hours)
			logger.info(f"Added work log {log.id}")
		elif args.log_command == "update":
			log = entities.update_work_log(plan, args.id, args.hours, args.task, args.type)
			logger.info(f"Work log {log.id}: {log.type.value} '{log.task_name}' {log.hours}h")
		elif args.log_command == "delete":
			entities.delete_work_log(plan, args.id)
			logger.info(f"Deleted work log {args.id}")
		elif args.log_command == "list":
			members = {m.id: m.name for m in plan.members}
			periods = {p.id: p.name for p in plan.periods}
			for log in plan.work_logs:
				logger.info(
					f"{log.id} {members.get(log.member_id)} / {periods.get(log.period_id)}: "
					f"{log.type.value} '{log.task_name}' {csv_io.format_hours(log.hours)}h"
				)


def run_leave_command(args, store, logger) -> None:
	with edit_plan(store, args.plan) as plan:
		log = entities.set_leave(plan, args.member, args.period, args.hours)
	if log is None:
		logger.info(f"Cleared leave for '{args.member}' in '{args.period}'")
	else:
		logger.info(f"Leave for '{args.member}' in '{args.period}': {csv_io.format_hours(log.hours)}h")


def run_settings_command(args, store, logger) -> None:
	if args.settings_command == "show":
		plan = ensure_plan(store.read(), args.plan, create=False)
		settings = plan.settings
		logger.info(
			f"Plan '{plan.name}': {settings.default_daily_hours}h/day, "
			f"public holidays {'on' if settings.consider_public_holidays else 'off'}, "
			f"company holidays: {', '.join(settings.company_holidays) or 'none'}"
		)
		return

	public = None if args.public_holidays is None else args.public_holidays == "on"
	holidays = importer.load_holidays(fetch_holidays)
	with edit_plan(store, args.plan) as plan:
		entities.update_settings(plan, args.daily_hours, public, args.add_holiday, args.remove_holiday)
		entities.recalculate_working_days(plan, holidays)
	logger.info(f"Updated settings for plan '{plan.name}'")


def _add_plan_option(parser):
	parser.add_argument("--plan", help="Plan name (default: active plan)")


def _add_edit_parsers(subparsers):
	plan_parser = subparsers.add_parser("plan", help="Create, rename, switch and delete plans")
	plan_sub = plan_parser.add_subparsers(dest="plan_command", required=True)
	plan_sub.add_parser("list", help="List plans; the active one is marked with *")
	plan_sub.add_parser("create", help="Create a plan and make it active").add_argument("name")
	rename_parser = plan_sub.add_parser("rename", help="Rename a plan")
	rename_parser.add_argument("name")
	rename_parser.add_argument("new_name")
	plan_sub.add_parser("switch", help="Make a plan the active one").add_argument("name")
	plan_sub.add_parser("delete", help="Delete a plan and its staged import").add_argument("name")

	member_parser = subparsers.add_parser("member", help="Edit members of a plan")
	member_sub = member_parser.add_subparsers(dest="member_command", required=True)
	for action in ("add", "update"):
		p = member_sub.add_parser(action)
		p.add_argument("name")
		if action == "update":
			p.add_argument("--name", dest="new_name", help="New member name")
		p.add_argument("--buffer", type=float, help="Buffer percentage (0-100)")
		p.add_argument("--project-ratio", type=float, help="Project share percentage (0-100)")
		p.add_argument("--feature-ratio", type=float, help="Feature share percentage (0-100)")
		_add_plan_option(p)
	p = member_sub.add_parser("delete", help="Delete a member and all of its work logs")
	p.add_argument("name")
	_add_plan_option(p)

	period_parser = subparsers.add_parser("period", help="Edit periods of a plan")
	period_sub = period_parser.add_subparsers(dest="period_command", required=True)
	p = period_sub.add_parser("add")
	p.add_argument("name")
	p.add_argument("start_date", help="YYYY-MM-DD")
	p.add_argument("end_date", help="YYYY-MM-DD")
	_add_plan_option(p)
	p = period_sub.add_parser("update")
	p.add_argument("name")
	p.add_argument("--name", dest="new_name", help="New period name")
	p.add_argument("--start", dest="start_date", help="YYYY-MM-DD")
	p.add_argument("--end", dest="end_date", help="YYYY-MM-DD")
	_add_plan_option(p)
	p = period_sub.add_parser("delete", help="Delete a period and all of its work logs")
	p.add_argument("name")
	_add_plan_option(p)

	log_parser = subparsers.add_parser("log", help="Edit work logs of a plan")
	log_sub = log_parser.add_subparsers(dest="log_command", required=True)
	p = log_sub.add_parser("add")
	p.add_argument("member")
	p.add_argument("period")
	p.add_argument("type", choices=["project", "feature", "leave"])
	p.add_argument("task")
	p.add_argument("hours", type=float)
	_add_plan_option(p)
	p = log_sub.add_parser("update")
	p.add_argument("id")
	p.add_argument("--hours", type=float)
	p.add_argument("--task")
	p.add_argument("--type", choices=["project", "feature", "leave"])
	_add_plan_option(p)
	p = log_sub.add_parser("delete")
	p.add_argument("id")
	_add_plan_option(p)
	_add_plan_option(log_sub.add_parser("list"))

	leave_parser = subparsers.add_parser("leave", help="Record time off")
	leave_sub = leave_parser.add_subparsers(dest="leave_command", required=True)
	p = leave_sub.add_parser("set", help="Set a member's leave hours for a period (0 clears it)")
	p.add_argument("member")
	p.add_argument("period")
	p.add_argument("hours", type=float)
	_add_plan_option(p)

	settings_parser = subparsers.add_parser("settings", help="Show or change plan settings")
	settings_sub = settings_parser.add_subparsers(dest="settings_command", required=True)
	_add_plan_option(settings_sub.add_parser("show"))
	p = settings_sub.add_parser("set")
	p.add_argument("--daily-hours", type=float)
	p.add_argument("--public-holidays", choices=["on", "off"])
	p.add_argument("--add-holiday", action="append", default=[], metavar="DATE")
	p.add_argument("--remove-holiday", action="append", default=[], metavar="DATE")
	_add_plan_option(p)


def build_parser() -> argparse.ArgumentParser:
	default_db = os.getenv("WORKLOAD_DB_PATH", constants.DEFAULT_DB_PATH)

	parser = argparse.ArgumentParser(description="Team workload planner CLI")
	parser.add_argument("--verbose", action="store_true", help="Enable verbose (DEBUG) logging")
	parser.add_argument("--db", default=default_db, help=f"Path to the JSON store (default: {default_db})")

	subparsers = parser.add_subparsers(dest="command")

	stage_periods_parser = subparsers.add_parser("stage-periods", help="Stage periods from a CSV for later review")
	stage_periods_parser.add_argument("file", help="CSV with name,startDate,endDate")
	stage_periods_parser.add_argument("--plan", help="Plan name to stage for (default: global bucket)")

	stage_workload_parser = subparsers.add_parser("stage-workload", help="Stage work logs from a CSV for later review")
	stage_workload_parser.add_argument("file", help="CSV with workType,projectName,taskName,memberName,hours...")
	stage_workload_parser.add_argument("--plan", help="Plan name to stage for (default: global bucket)")

	apply_parser = subparsers.add_parser("apply", help="Merge staged data into the live plan")
	apply_parser.add_argument("--plan", help="Plan name whose staging to apply (default: global bucket)")

	clear_parser = subparsers.add_parser("clear", help="Discard staged data")
	clear_parser.add_argument("target", choices=["global", "plan", "all"], help="Which staging bucket(s) to clear")
	clear_parser.add_argument("--plan", help="Plan name (for target 'plan')")

	import_periods_parser = subparsers.add_parser("import-periods", help="Import periods straight into the active plan")
	import_periods_parser.add_argument("file")

	import_workload_parser = subparsers.add_parser("import-workload", help="Import work logs straight into the active plan")
	import_workload_parser.add_argument("file")

	export_parser = subparsers.add_parser("export", help="Export a summary CSV of the active plan")
	export_parser.add_argument("kind", choices=["workload", "leaves"])
	export_parser.add_argument("output", help="Output CSV path")

	subparsers.add_parser("status", help="Show the active plan and pending staged imports")

	_add_edit_parsers(subparsers)
	return parser


EDIT_COMMANDS = {
	"plan": run_plan_command,
	"member": run_member_command,
	"period": run_period_command,
	"log": run_log_command,
	"leave": run_leave_command,
	"settings": run_settings_command,
}


def main(argv=None) -> int:
	parser = build_parser()
	args = parser.parse_args(argv)
	logger = get_logger("cli", "cli", level="DEBUG" if args.verbose else None)

	if not args.command:
		parser.print_help()
		return 1

	store = JsonDocumentStore(args.db)

	try:
		if args.command in ("stage-periods", "stage-workload", "import-periods", "import-workload"):
			text = _read_input(args.file, logger)
			if text is None:
				return 1

		if args.command in EDIT_COMMANDS:
			EDIT_COMMANDS[args.command](args, store, logger)
		elif args.command == "stage-periods":
			periods = importer.stage_periods(store, text, plan_name=args.plan)
			logger.info(f"Successfully staged {len(periods)} periods.")
		elif args.command == "stage-workload":
			work_logs = importer.stage_workload(store, text, plan_name=args.plan)
			logger.info(f"Successfully staged {len(work_logs)} work logs.")
		elif args.command == "apply":
			report = importer.apply_staging(store, plan_name=args.plan)
			logger.info(f"Applied staging: {report.to_dict()}")
		elif args.command == "clear":
			if args.target == "plan" and not args.plan:
				logger.error("--plan is required when clearing a plan's staging")
				return 1
			StagingStore(store).clear(args.target, plan_name=args.plan)
		elif args.command == "import-periods":
			report = importer.import_periods(store, text)
			logger.info(f"Successfully imported {report.periods_added} periods.")
		elif args.command == "import-workload":
			report = importer.import_workload(store, text)
			logger.info(f"Successfully imported {report.work_logs_added} work logs.")
		elif args.command == "export":
			if not export_summary(store, args.kind, args.output, logger):
				return 1
		elif args.command == "status":
			show_status(store, logger)
	except ImportFailure as e:
		logger.error(f"Failed: {e}")
		return 1
	except CorruptStoreError as e:
		logger.error(str(e))
		return 1

	return 0


if __name__ == "__main__":
	sys.exit(main())
