"""
Error taxonomy.

Every failure raised while importing CSV data or editing a plan is an
ImportFailure, so callers (CLI, API) can catch one type and surface the
message as-is. Row and column
numbers are 1-based and count the header as row 1.
"""

from typing import Optional


class ImportFailure(ValueError):
	"""Base class for user-visible import and edit errors. Nothing is written when raised."""


class MalformedInputError(ImportFailure):
	"""CSV text has no data rows."""

	def __init__(self, message: str = "CSV is empty or header-only"):
		super().__init__(message)


class MissingColumnsError(ImportFailure):
	def __init__(self, row: int, expected: int, found: int, fields: Optional[list] = None):
		self.row = row
		self.expected = expected
		self.found = found
		names = f" ({','.join(fields)})" if fields else ""
		super().__init__(f"row {row}: at least {expected} columns{names} required, found {found}")


class InvalidDateFormatError(ImportFailure):
	def __init__(self, row: int, column: int, value: str):
		self.row = row
		self.column = column
		self.value = value
		super().__init__(f"row {row}, column {column}: invalid date (expected YYYY-MM-DD): \"{value}\"")


class InvalidNumberError(ImportFailure):
	def __init__(self, row: int, column: int, value: str):
		self.row = row
		self.column = column
		self.value = value
		super().__init__(f"row {row}, column {column}: hours is not a number: \"{value}\"")


class MissingPrerequisiteError(ImportFailure):
	"""Workload import attempted before any periods exist."""

	def __init__(self, message: str = "no periods found; import periods first"):
		super().__init__(message)


class PlanNotFoundError(ImportFailure):
	def __init__(self, plan_name: str):
		self.plan_name = plan_name
		super().__init__(f"plan not found: {plan_name}")


class EntityNotFoundError(ImportFailure):
	def __init__(self, kind: str, key: str):
		self.kind = kind
		self.key = key
		super().__init__(f"{kind} not found: {key}")


class DuplicateNameError(ImportFailure):
	def __init__(self, kind: str, name: str):
		self.kind = kind
		self.name = name
		super().__init__(f"{kind} \"{name}\" already exists")


class InvalidValueError(ImportFailure):
	"""A hand-entered value (name, ratio, date, hours) is out of range or malformed."""


class CorruptStoreError(ValueError):
	"""The JSON store exists but cannot be read as a document. Never overwritten."""

	def __init__(self, path, reason: str):
		self.path = path
		super().__init__(f"store {path} is unreadable ({reason}); fix or move it away before retrying")
