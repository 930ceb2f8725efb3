"""
CSV reading and writing for period and workload imports, plus summary exports.

Input formats (header line is always skipped and never validated):

	periods:  name,startDate,endDate
	workload: workType,projectName,taskName,memberName,hours1,...,hoursN

Parsing is fail-fast: the first bad row raises and nothing is returned.
"""

import csv
import datetime
import io
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from workload_planner import constants
from workload_planner.errors import (
	InvalidDateFormatError,
	InvalidNumberError,
	MalformedInputError,
	MissingColumnsError,
)
from workload_planner.models import WorkType

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(constants.DATE_PATTERN)

# hour columns start after the four fixed workload columns
FIRST_HOURS_COLUMN = len(constants.WORKLOAD_CSV_FIELDS) + 1


@dataclass
class PeriodRow:
	name: str
	start_date: str
	end_date: str
	working_days: int = 0


@dataclass
class WorkloadRow:
	work_type: str
	project_name: str
	task_name: str
	member_name: str
	hours: list = field(default_factory=list)


def split_csv_line(line: str) -> list:
	"""Split one CSV line: commas separate fields, "..." quotes, "" is a literal quote."""
	return next(csv.reader([line], skipinitialspace=True), [])


def _data_lines(text: str):
	"""Yield (row_number, columns) for every non-blank data line. Header is row 1."""
	lines = (text or "").strip().split("\n")
	if len(lines) < 2:
		raise MalformedInputError()

	for row_number, raw in enumerate(lines[1:], start=2):
		line = raw.strip()
		if not line:
			continue
		yield row_number, split_csv_line(line)


def is_valid_date(value: str) -> bool:
	"""YYYY-MM-DD digits that also name a real calendar day."""
	if not _DATE_RE.match(value):
		return False
	try:
		datetime.datetime.strptime(value, constants.DATE_FORMAT)
	except ValueError:
		return False
	return True


def parse_number(value: str):
	"""
	Parse an hours cell; integral values come back as int. Raises ValueError.

	The whole cell must be a number. Cells with trailing text such as "4h" or
	"3 hrs" are rejected rather than read as their leading number, so a
	spreadsheet unit suffix surfaces as an InvalidNumberError instead of being
	silently accepted.
	"""
	number = float(value)
	if not math.isfinite(number):
		raise ValueError(f"not a finite number: {value}")
	return int(number) if number.is_integer() else number


def parse_period_csv(text: str) -> list:
	"""
	Parse period CSV text into PeriodRow entries in input order.

	workingDays is always 0 here; it is computed later from the date range.

	Raises:
		MalformedInputError: no data rows
		MissingColumnsError: a row has fewer than 3 columns
		InvalidDateFormatError: a date is not YYYY-MM-DD
	"""
	rows = []
	expected = len(constants.PERIOD_CSV_FIELDS)
	for row_number, columns in _data_lines(text):
		if len(columns) < expected:
			raise MissingColumnsError(row_number, expected, len(columns), constants.PERIOD_CSV_FIELDS)

		name, start_date, end_date = (c.strip() for c in columns[:expected])
		for column, value in ((2, start_date), (3, end_date)):
			if not is_valid_date(value):
				raise InvalidDateFormatError(row_number, column, value)

		rows.append(PeriodRow(name=name, start_date=start_date, end_date=end_date, working_days=0))

	logger.debug(f"Parsed {len(rows)} period rows")
	return rows


def parse_workload_csv(text: str) -> list:
	"""
	Parse workload CSV text into WorkloadRow entries in input order.

	Raises:
		MalformedInputError: no data rows
		MissingColumnsError: a row has fewer than 4 columns
		InvalidNumberError: an hours cell is not a number
	"""
	rows = []
	expected = len(constants.WORKLOAD_CSV_FIELDS)
	for row_number, columns in _data_lines(text):
		if len(columns) < expected:
			raise MissingColumnsError(row_number, expected, len(columns), constants.WORKLOAD_CSV_FIELDS)

		work_type, project_name, task_name, member_name = columns[:expected]
		hours = []
		for offset, cell in enumerate(columns[expected:]):
			try:
				hours.append(parse_number(cell))
			except ValueError:
				raise InvalidNumberError(row_number, FIRST_HOURS_COLUMN + offset, cell) from None

		rows.append(WorkloadRow(
			work_type=work_type.strip(),
			project_name=project_name.strip(),
			task_name=task_name.strip(),
			member_name=member_name.strip(),
			hours=hours,
		))

	logger.debug(f"Parsed {len(rows)} workload rows")
	return rows


# -- Generation --

def _write_rows(rows) -> str:
	buffer = io.StringIO()
	writer = csv.writer(buffer, lineterminator="\n")
	writer.writerows(rows)
	return buffer.getvalue().rstrip("\n")


def format_hours(value) -> str:
	if isinstance(value, float) and value.is_integer():
		return str(int(value))
	return str(value)


def generate_period_csv(periods) -> str:
	"""Render periods (Period or PeriodRow) as name,startDate,endDate CSV without a trailing newline."""
	rows = [constants.PERIOD_CSV_FIELDS]
	rows.extend([p.name, p.start_date, p.end_date] for p in periods)
	return _write_rows(rows)


def _hours_by_period(member, periods, work_logs, work_type):
	totals = []
	for period in periods:
		total = sum(
			log.hours for log in work_logs
			if log.member_id == member.id and log.period_id == period.id and log.type == work_type
		)
		totals.append(format_hours(total))
	return totals


def generate_workload_summary_csv(members, periods, work_logs) -> str:
	"""Per member, one Project row and one Feature row of summed hours per period. Leave is excluded."""
	rows = [[constants.SUMMARY_CATEGORY_HEADER, constants.SUMMARY_MEMBER_HEADER] + [p.name for p in periods]]
	for member in members:
		rows.append([constants.PROJECT_CATEGORY, member.name] + _hours_by_period(member, periods, work_logs, WorkType.PROJECT))
		rows.append([constants.FEATURE_CATEGORY, member.name] + _hours_by_period(member, periods, work_logs, WorkType.FEATURE))
	return _write_rows(rows)


def generate_leaves_summary_csv(members, periods, work_logs) -> str:
	"""One Leave row per member with summed leave hours per period."""
	rows = [[constants.LEAVE_CATEGORY, constants.SUMMARY_MEMBER_HEADER] + [p.name for p in periods]]
	for member in members:
		rows.append([constants.LEAVE_CATEGORY, member.name] + _hours_by_period(member, periods, work_logs, WorkType.LEAVE))
	return _write_rows(rows)


def write_export_csv(content: str, filename) -> Path:
	"""Write an export as BOM-prefixed UTF-8 so spreadsheet apps detect the encoding."""
	path = Path(filename)
	path.parent.mkdir(parents=True, exist_ok=True)
	with open(path, "w", encoding="utf-8-sig", newline="") as f:
		f.write(content)
	logger.info(f"Export saved to {path}")
	return path


def read_csv_text(filename) -> str:
	"""Read an import file, tolerating a leading BOM."""
	with open(filename, "r", encoding="utf-8-sig", newline="") as f:
		return f.read()
