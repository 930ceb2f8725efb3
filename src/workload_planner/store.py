import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Optional
from workload_planner import constants
from workload_planner.errors import CorruptStoreError, DuplicateNameError, InvalidValueError, PlanNotFoundError
from workload_planner.models import Plan
from workload_planner.staging import ClearTarget, clear_in_document, rename_in_document

logger = logging.getLogger(__name__)


def default_document() -> dict:
	return {"plans": [], "activePlanId": ""}


class JsonDocumentStore:
	"""
	The persisted JSON document shared by the CLI and the web app:

		{"plans": [...], "activePlanId": "...", "staging": {"global": {...}, "byPlan": {...}}}

	The store does no locking; each session() is one read-modify-write cycle.
	"""

	def __init__(self, path=constants.DEFAULT_DB_PATH):
		self.path = Path(path)

	def _ensure(self) -> None:
		self.path.parent.mkdir(parents=True, exist_ok=True)
		if not self.path.exists():
			self.write(default_document())

	def read(self) -> dict:
		"""
		Load the document, creating the file with the default document if missing.

		Raises:
			CorruptStoreError: the file is not a JSON object. The file is left as is.
		"""
		self._ensure()
		try:
			with open(self.path, "r", encoding="utf-8") as f:
				document = json.load(f)
		except json.JSONDecodeError as e:
			raise CorruptStoreError(self.path, str(e)) from e

		if not isinstance(document, dict):
			raise CorruptStoreError(self.path, f"top level is {type(document).__name__}, not an object")
		document.setdefault("plans", [])
		document.setdefault("activePlanId", "")
		return document

	def write(self, document: dict) -> None:
		"""Write to a sibling temp file, then swap it in so readers never see a partial document."""
		self.path.parent.mkdir(parents=True, exist_ok=True)
		tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
		with open(tmp_path, "w", encoding="utf-8") as f:
			json.dump(document, f, indent=2, ensure_ascii=False)
		tmp_path.replace(self.path)

	@contextmanager
	def session(self):
		"""Yield the document; it is written back only if the block exits cleanly."""
		document = self.read()
		yield document
		self.write(document)


# -- Plan helpers operating on a loaded document --

def get_active_plan(document: dict) -> Optional[Plan]:
	"""Active plan, falling back to (and activating) the first plan when none is set."""
	plans = document.get("plans") or []
	if not document.get("activePlanId") and plans:
		document["activePlanId"] = plans[0]["id"]
	for data in plans:
		if data["id"] == document.get("activePlanId"):
			return Plan.from_dict(data)
	return None


def find_plan_by_name(document: dict, name: str) -> Optional[Plan]:
	for data in document.get("plans") or []:
		if data.get("name") == name:
			return Plan.from_dict(data)
	return None


def save_plan(document: dict, plan: Plan) -> None:
	"""Replace the plan with the same id, or append it. A document with no active plan adopts it."""
	plans = document.setdefault("plans", [])
	data = plan.to_dict()
	for index, existing in enumerate(plans):
		if existing["id"] == plan.id:
			plans[index] = data
			break
	else:
		plans.append(data)

	active_ids = {p["id"] for p in plans}
	if document.get("activePlanId") not in active_ids:
		document["activePlanId"] = plan.id


def ensure_plan(document: dict, plan_name: Optional[str] = None, create: bool = True) -> Plan:
	"""
	Resolve the plan an import targets: the plan named plan_name, else the active plan.
	A missing plan is created (named plan_name or "Default Plan") unless create is False.
	"""
	plan = find_plan_by_name(document, plan_name) if plan_name else get_active_plan(document)
	if plan is not None:
		return plan
	if not create:
		raise PlanNotFoundError(plan_name or "active plan")

	plan = Plan.create(plan_name or constants.DEFAULT_PLAN_NAME)
	logger.info(f"Created plan '{plan.name}' ({plan.id})")
	return plan


def list_plans(document: dict) -> list:
	return [Plan.from_dict(data) for data in document.get("plans") or []]


def _plan_name(name: str) -> str:
	name = (name or "").strip()
	if not name:
		raise InvalidValueError("plan name must not be empty")
	return name


def _require_plan(document: dict, name: str) -> Plan:
	plan = find_plan_by_name(document, name)
	if plan is None:
		raise PlanNotFoundError(name)
	return plan


def add_plan(document: dict, name: str) -> Plan:
	"""Create an empty plan with default settings and make it the active plan."""
	name = _plan_name(name)
	if find_plan_by_name(document, name) is not None:
		raise DuplicateNameError("plan", name)

	plan = Plan.create(name)
	save_plan(document, plan)
	document["activePlanId"] = plan.id
	logger.info(f"Created plan '{plan.name}' ({plan.id})")
	return plan


def rename_plan(document: dict, name: str, new_name: str) -> Plan:
	"""Rename a plan. Its pending staged import follows it to the new name."""
	plan = _require_plan(document, name)
	new_name = _plan_name(new_name)
	if new_name == plan.name:
		return plan
	if find_plan_by_name(document, new_name) is not None:
		raise DuplicateNameError("plan", new_name)

	plan.name = new_name
	save_plan(document, plan)
	rename_in_document(document, name, new_name)
	logger.info(f"Renamed plan '{name}' to '{new_name}'")
	return plan


def switch_plan(document: dict, name: str) -> Plan:
	plan = _require_plan(document, name)
	document["activePlanId"] = plan.id
	return plan


def delete_plan(document: dict, name: str) -> Plan:
	"""
	Remove a plan and discard its staged import. Deleting the active plan
	activates the first remaining plan, or none.
	"""
	plan = _require_plan(document, name)
	document["plans"] = [data for data in document.get("plans") or [] if data["id"] != plan.id]
	if document.get("activePlanId") == plan.id:
		document["activePlanId"] = document["plans"][0]["id"] if document["plans"] else ""
	clear_in_document(document, ClearTarget.PLAN, plan.name)
	logger.info(f"Deleted plan '{plan.name}' ({plan.id})")
	return plan


@contextmanager
def edit_plan(store: JsonDocumentStore, plan_name: Optional[str] = None):
	"""
	Yield the named (or active) plan inside one store session. The plan is saved
	back only if the block exits cleanly.

	Raises:
		PlanNotFoundError: no such plan (or no plans at all)
	"""
	with store.session() as document:
		plan = ensure_plan(document, plan_name, create=False)
		yield plan
		save_plan(document, plan)
