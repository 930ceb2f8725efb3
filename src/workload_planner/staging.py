"""
Staging mailbox for out-of-band imports.

At most one pending payload exists per key: a plan name (staging.byPlan) or
the global bucket (staging.global). save() replaces, it never appends, so a
caller that wants to keep earlier staged data must load it and re-include it.
"""

import logging
from enum import Enum
from typing import Optional
from workload_planner.models import StagingPayload

logger = logging.getLogger(__name__)


class ClearTarget(Enum):
	GLOBAL = "global"
	PLAN = "plan"
	ALL = "all"

	@classmethod
	def from_string(cls, value):
		if isinstance(value, ClearTarget):
			return value
		try:
			return cls((value or "").strip().lower())
		except ValueError:
			raise ValueError(f"Unknown staging clear target: {value}") from None


def _staging_section(document: dict) -> dict:
	staging = document.get("staging")
	if not isinstance(staging, dict):
		staging = {"global": {}, "byPlan": {}}
		document["staging"] = staging
	staging.setdefault("global", {})
	staging.setdefault("byPlan", {})
	return staging


def describe_key(plan_name: Optional[str]) -> str:
	return f"plan '{plan_name}'" if plan_name else "global bucket"


class StagingStore:
	"""Save/load/clear staged payloads through a JsonDocumentStore."""

	def __init__(self, store):
		self.store = store

	def save(self, payload: StagingPayload, plan_name: Optional[str] = None) -> None:
		with self.store.session() as document:
			save_to_document(document, payload, plan_name)
		logger.info(
			f"Staged {len(payload.periods)} periods, {len(payload.members)} members, "
			f"{len(payload.work_logs)} work logs for {describe_key(plan_name)}"
		)

	def load(self, plan_name: Optional[str] = None) -> Optional[StagingPayload]:
		"""Pending payload for the key, or None when nothing (or only an empty payload) is staged."""
		return load_from_document(self.store.read(), plan_name)

	def clear(self, target, plan_name: Optional[str] = None) -> None:
		target = ClearTarget.from_string(target)
		with self.store.session() as document:
			clear_in_document(document, target, plan_name)
		logger.info(f"Cleared staging ({target.value}{', ' + plan_name if plan_name else ''})")

	def pending(self) -> list:
		"""Keys with a non-empty staged payload; None stands for the global bucket."""
		document = self.store.read()
		keys = []
		if load_from_document(document, None) is not None:
			keys.append(None)
		staging = document.get("staging") or {}
		for plan_name in sorted((staging.get("byPlan") or {}).keys()):
			if load_from_document(document, plan_name) is not None:
				keys.append(plan_name)
		return keys


def load_from_document(document: dict, plan_name: Optional[str] = None) -> Optional[StagingPayload]:
	staging = document.get("staging") or {}
	if plan_name:
		data = (staging.get("byPlan") or {}).get(plan_name)
	else:
		data = staging.get("global")
	if not data:
		return None

	payload = StagingPayload.from_dict(data)
	return None if payload.is_empty() else payload


def save_to_document(document: dict, payload: StagingPayload, plan_name: Optional[str] = None) -> None:
	staging = _staging_section(document)
	if plan_name:
		staging["byPlan"][plan_name] = payload.to_dict()
	else:
		staging["global"] = payload.to_dict()


def clear_in_document(document: dict, target: ClearTarget, plan_name: Optional[str] = None) -> None:
	if not isinstance(document.get("staging"), dict):
		return
	staging = _staging_section(document)
	if target is ClearTarget.GLOBAL:
		staging["global"] = {}
	elif target is ClearTarget.PLAN:
		if plan_name:
			staging["byPlan"].pop(plan_name, None)
	elif target is ClearTarget.ALL:
		staging["global"] = {}
		staging["byPlan"] = {}


def rename_in_document(document: dict, old_name: str, new_name: str) -> None:
	"""Move byPlan[old_name] to byPlan[new_name] so a renamed plan keeps its pending import."""
	staging = document.get("staging")
	if not isinstance(staging, dict):
		return
	by_plan = staging.get("byPlan") or {}
	if old_name in by_plan:
		by_plan[new_name] = by_plan.pop(old_name)
		staging["byPlan"] = by_plan
