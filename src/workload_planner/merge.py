"""
Reconciliation of a staged payload into a live plan.

Members and periods carry an opaque id, but their name is the natural key: a
staged entity whose name already exists live is the same entity, whatever id
the staging producer gave it. Such collisions are resolved by keeping the live
entity and rewriting the staged work logs to point at it, never by keeping
both. Live entities that repeat an earlier live name are folded into the first
one the same way, so no log is left pointing at a dropped entity.

Work logs are identified by content (memberId, periodId, taskName, type). A
staged log replaces any live log with the same content key.
"""

import copy
import logging
from dataclasses import dataclass, field, replace
from workload_planner.models import Plan, StagingPayload, new_id

logger = logging.getLogger(__name__)


class NameIndex:
	"""An id-keyed list of entities with a name -> entity index kept alongside it."""

	def __init__(self, entities=()):
		self.entities = []
		self._by_name = {}
		self._ids = set()
		for entity in entities:
			self.add(entity)

	def add(self, entity) -> bool:
		"""Append unless the name is already taken. Returns True if appended."""
		if entity.name in self._by_name:
			return False
		self._by_name[entity.name] = entity
		self._ids.add(entity.id)
		self.entities.append(entity)
		return True

	def get(self, name):
		return self._by_name.get(name)

	def __contains__(self, name) -> bool:
		return name in self._by_name

	def has_id(self, entity_id) -> bool:
		return entity_id in self._ids

	def __len__(self) -> int:
		return len(self.entities)


@dataclass
class MergeReport:
	members_added: int = 0
	periods_added: int = 0
	work_logs_added: int = 0
	work_logs_replaced: int = 0
	work_logs_dropped: int = 0
	live_duplicates_folded: int = 0
	remapped_ids: dict = field(default_factory=dict)

	@property
	def changed(self) -> bool:
		return bool(self.members_added or self.periods_added or self.work_logs_added or self.work_logs_replaced or self.live_duplicates_folded)

	def to_dict(self) -> dict:
		return {
			"membersAdded": self.members_added,
			"periodsAdded": self.periods_added,
			"workLogsAdded": self.work_logs_added,
			"workLogsReplaced": self.work_logs_replaced,
			"workLogsDropped": self.work_logs_dropped,
			"liveDuplicatesFolded": self.live_duplicates_folded,
			"remappedIds": dict(self.remapped_ids),
		}


def merge_by_name(live, staged) -> list:
	"""Live entities followed by staged entities whose name is not already present."""
	index = NameIndex(live)
	for entity in staged:
		index.add(entity)
	return index.entities


def _merge_entities(live, staged, live_remap: dict, staged_remap: dict, kind: str) -> tuple:
	"""
	Name-keyed merge of one entity kind.

	live_remap gets dropped_live_id -> surviving_id for live entities that repeat
	an earlier live name. staged_remap gets staged_id -> surviving_id for every
	staged entity that lost to an existing one with the same name, or that was
	re-keyed because its id was already taken.
	"""
	index = NameIndex()
	for entity in live:
		if index.add(entity):
			continue
		survivor = index.get(entity.name)
		if survivor.id != entity.id:
			live_remap[entity.id] = survivor.id
		logger.warning(f"Duplicate live {kind} name '{entity.name}': folding {entity.id} into {survivor.id}")

	added = 0
	for entity in staged:
		if entity.name not in index and index.has_id(entity.id):
			# new name reusing an id that is already taken: keep both, re-key the staged one
			rekeyed = replace(entity, id=new_id())
			staged_remap[entity.id] = rekeyed.id
			entity = rekeyed
		if index.add(entity):
			added += 1
			continue
		survivor = index.get(entity.name)
		if survivor.id != entity.id:
			staged_remap[entity.id] = survivor.id
	return index, added


def _rewrite(log, member_remap: dict, period_remap: dict):
	member_id = member_remap.get(log.member_id, log.member_id)
	period_id = period_remap.get(log.period_id, log.period_id)
	if member_id == log.member_id and period_id == log.period_id:
		return log
	return replace(log, member_id=member_id, period_id=period_id)


def merge_staging_with_report(plan: Plan, payload: StagingPayload) -> tuple:
	"""merge_staging() that also returns a MergeReport."""
	report = MergeReport()
	if payload is None or payload.is_empty():
		return plan, report

	result = plan.copy()
	payload = copy.deepcopy(payload)

	live_members, staged_members = {}, {}
	live_periods, staged_periods = {}, {}
	members, report.members_added = _merge_entities(result.members, payload.members, live_members, staged_members, "member")
	periods, report.periods_added = _merge_entities(result.periods, payload.periods, live_periods, staged_periods, "period")
	report.remapped_ids = {**staged_members, **staged_periods}
	report.live_duplicates_folded = len(live_members) + len(live_periods)

	live_logs = [_rewrite(log, live_members, live_periods) for log in result.work_logs]

	# last staged log per content key wins, first-seen order kept
	staged_by_key = {}
	for log in payload.work_logs:
		log = _rewrite(log, staged_members, staged_periods)
		if not (members.has_id(log.member_id) and periods.has_id(log.period_id)):
			logger.warning(
				f"Dropping staged work log {log.id} ('{log.task_name}'): "
				f"member {log.member_id} or period {log.period_id} does not exist in plan '{plan.name}'"
			)
			report.work_logs_dropped += 1
			continue
		staged_by_key[log.content_key] = log
	staged_logs = list(staged_by_key.values())

	live_keys = {log.content_key for log in live_logs}
	surviving_live = [log for log in live_logs if log.content_key not in staged_by_key]
	report.work_logs_replaced = len(live_logs) - len(surviving_live)
	report.work_logs_added = sum(1 for key in staged_by_key if key not in live_keys)

	result.members = members.entities
	result.periods = periods.entities
	result.work_logs = surviving_live + staged_logs

	logger.info(
		f"Merged staging into plan '{plan.name}': +{report.members_added} members, "
		f"+{report.periods_added} periods, +{report.work_logs_added} work logs, "
		f"{report.work_logs_replaced} replaced, {len(report.remapped_ids)} ids remapped"
	)
	return result, report


def merge_staging(plan: Plan, payload: StagingPayload) -> Plan:
	"""
	Merge a staged payload into a plan and return the merged copy.

	1. staged members/periods whose name already exists are dropped, new names appended
	2. staged ids that lost to an existing name are remapped to the surviving id
	3. staged work logs are rewritten through the remap, live logs through the
	   remap of folded live duplicates
	4. live logs sharing a content key with a staged log are replaced by it

	An empty or missing payload returns the plan unchanged. Applying the same
	payload twice gives the same result as applying it once.
	"""
	merged, _ = merge_staging_with_report(plan, payload)
	return merged
