from typing import Optional
from fastapi import APIRouter, Body, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from workload_planner import constants, entities, importer
from workload_planner.errors import CorruptStoreError, ImportFailure, InvalidValueError
from workload_planner.staging import StagingStore
from workload_planner.store import (
	JsonDocumentStore,
	add_plan,
	delete_plan,
	edit_plan,
	get_active_plan,
	list_plans,
	rename_plan,
	switch_plan,
)

DB_PATH = constants.DEFAULT_DB_PATH

api = APIRouter(prefix="/api", tags=["api"])


def get_store() -> JsonDocumentStore:
	return JsonDocumentStore(DB_PATH)


def _error(message: str, status_code: int = 400) -> JSONResponse:
	return JSONResponse({"error": message}, status_code=status_code)


def _run(action, *args, **kwargs):
	"""Call action, turning user-visible failures into JSON error responses."""
	try:
		return action(*args, **kwargs)
	except ImportFailure as e:
		return _error(str(e))
	except CorruptStoreError as e:
		return _error(str(e), 500)


@api.get("/health")
def health():
	return {"status": "ok"}


@api.get("/data")
def api_get_data():
	return _run(lambda: get_store().read())


def _import_periods(text: str, plan: Optional[str], stage: bool) -> dict:
	store = get_store()
	if stage:
		periods = importer.stage_periods(store, text, plan_name=plan)
		return {"success": True, "count": len(periods), "staged": True, "periods": [p.to_dict() for p in periods]}
	report = importer.import_periods(store, text)
	return {"success": True, "count": report.periods_added}


def _import_workload(text: str, plan: Optional[str], stage: bool) -> dict:
	store = get_store()
	if stage:
		work_logs = importer.stage_workload(store, text, plan_name=plan)
		return {"success": True, "count": len(work_logs), "staged": True}
	report = importer.import_workload(store, text)
	return {"success": True, "count": report.work_logs_added}


# The body is read on the event loop; the import itself (file I/O, holiday lookup)
# runs in the threadpool like the plain def handlers.
@api.post("/import/periods")
async def api_import_periods(request: Request, plan: Optional[str] = None, stage: bool = False):
	text = (await request.body()).decode("utf-8-sig")
	return await run_in_threadpool(_run, _import_periods, text, plan, stage)


@api.post("/import/workload")
async def api_import_workload(request: Request, plan: Optional[str] = None, stage: bool = False):
	text = (await request.body()).decode("utf-8-sig")
	return await run_in_threadpool(_run, _import_workload, text, plan, stage)


@api.post("/staging/clear")
def api_clear_staging(payload: dict = Body(...)):
	try:
		StagingStore(get_store()).clear(payload.get("target"), plan_name=payload.get("planName"))
	except ValueError as e:
		return _error(str(e))
	return {"success": True}


@api.post("/staging/apply")
def api_apply_staging(payload: Optional[dict] = Body(None)):
	def apply():
		report = importer.apply_staging(get_store(), plan_name=(payload or {}).get("planName"))
		return {"success": True, "report": report.to_dict()}
	return _run(apply)


def _plans_response(document: dict) -> dict:
	active = get_active_plan(document)
	return {
		"plans": [{"id": p.id, "name": p.name} for p in list_plans(document)],
		"activePlanId": active.id if active else "",
	}


@api.get("/plans")
def api_list_plans():
	return _run(lambda: _plans_response(get_store().read()))


def _edit_plans(action, *args) -> dict:
	with get_store().session() as document:
		action(document, *args)
		return _plans_response(document)


@api.post("/plans")
def api_create_plan(payload: dict = Body(...)):
	return _run(_edit_plans, add_plan, payload.get("name"))


@api.post("/plans/switch")
def api_switch_plan(payload: dict = Body(...)):
	return _run(_edit_plans, switch_plan, payload.get("name"))


@api.post("/plans/rename")
def api_rename_plan(payload: dict = Body(...)):
	return _run(_edit_plans, rename_plan, payload.get("name"), payload.get("newName"))


@api.delete("/plans/{name}")
def api_delete_plan(name: str):
	return _run(_edit_plans, delete_plan, name)


@api.post("/leave")
def api_set_leave(payload: dict = Body(...)):
	def set_leave():
		try:
			hours = float(payload.get("hours", 0))
		except (TypeError, ValueError):
			raise InvalidValueError(f"hours is not a number: {payload.get('hours')}") from None
		with edit_plan(get_store(), payload.get("planName")) as plan:
			log = entities.set_leave(plan, payload.get("member"), payload.get("period"), hours)
		return {"success": True, "workLog": log.to_dict() if log else None}
	return _run(set_leave)
