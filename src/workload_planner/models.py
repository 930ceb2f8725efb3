import copy
import uuid
from dataclasses import dataclass, field
from enum import Enum
from workload_planner import constants


def new_id() -> str:
	return str(uuid.uuid4())


class WorkType(Enum):
	PROJECT = "project"
	FEATURE = "feature"
	LEAVE = "leave"

	@classmethod
	def from_label(cls, value):
		"""
		Map a free-form CSV label to a WorkType.
		Returns None for labels that are not recognized so the caller decides the fallback.
		"""
		value = (value or "").strip().lower()
		if value in constants.PROJECT_LABELS:
			return cls.PROJECT
		if value in constants.FEATURE_LABELS:
			return cls.FEATURE
		return None


@dataclass
class Member:
	id: str
	name: str
	buffer: float = constants.MEMBER_DEFAULTS["buffer"]
	project_ratio: float = constants.MEMBER_DEFAULTS["projectRatio"]
	feature_ratio: float = constants.MEMBER_DEFAULTS["featureRatio"]

	@classmethod
	def create(cls, name: str) -> "Member":
		"""New member with a fresh id and the default buffer/ratios."""
		return cls(id=new_id(), name=name)

	@classmethod
	def from_dict(cls, data: dict) -> "Member":
		return cls(
			id=str(data["id"]),
			name=str(data.get("name", "")),
			buffer=data.get("buffer", constants.MEMBER_DEFAULTS["buffer"]),
			project_ratio=data.get("projectRatio", constants.MEMBER_DEFAULTS["projectRatio"]),
			feature_ratio=data.get("featureRatio", constants.MEMBER_DEFAULTS["featureRatio"]),
		)

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"name": self.name,
			"buffer": self.buffer,
			"projectRatio": self.project_ratio,
			"featureRatio": self.feature_ratio,
		}


@dataclass
class Period:
	id: str
	name: str
	start_date: str
	end_date: str
	working_days: int = 0

	@classmethod
	def from_dict(cls, data: dict) -> "Period":
		return cls(
			id=str(data["id"]),
			name=str(data.get("name", "")),
			start_date=data.get("startDate", ""),
			end_date=data.get("endDate", ""),
			working_days=int(data.get("workingDays", 0) or 0),
		)

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"name": self.name,
			"startDate": self.start_date,
			"endDate": self.end_date,
			"workingDays": self.working_days,
		}


@dataclass
class WorkLog:
	id: str
	member_id: str
	period_id: str
	type: WorkType
	task_name: str
	hours: float

	def __post_init__(self):
		if not isinstance(self.type, WorkType):
			self.type = WorkType(self.type)
		if self.hours < 0:
			raise ValueError(f"work log hours must be non-negative, got {self.hours}")

	@property
	def content_key(self) -> tuple:
		"""Semantic identity used for de-duplication; the log's own id is ignored."""
		return (self.member_id, self.period_id, self.task_name, self.type)

	@classmethod
	def from_dict(cls, data: dict) -> "WorkLog":
		return cls(
			id=str(data["id"]),
			member_id=str(data["memberId"]),
			period_id=str(data["periodId"]),
			type=WorkType(data.get("type", WorkType.PROJECT.value)),
			task_name=str(data.get("taskName", "")),
			hours=data.get("hours", 0),
		)

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"memberId": self.member_id,
			"periodId": self.period_id,
			"type": self.type.value,
			"taskName": self.task_name,
			"hours": self.hours,
		}


@dataclass
class Settings:
	default_daily_hours: float = constants.SETTINGS_DEFAULTS["defaultDailyHours"]
	consider_public_holidays: bool = constants.SETTINGS_DEFAULTS["considerPublicHolidays"]
	company_holidays: list = field(default_factory=list)

	@classmethod
	def from_dict(cls, data) -> "Settings":
		data = data or {}
		return cls(
			default_daily_hours=data.get("defaultDailyHours", constants.SETTINGS_DEFAULTS["defaultDailyHours"]),
			consider_public_holidays=bool(data.get("considerPublicHolidays", constants.SETTINGS_DEFAULTS["considerPublicHolidays"])),
			company_holidays=list(data.get("companyHolidays") or []),
		)

	def to_dict(self) -> dict:
		return {
			"defaultDailyHours": self.default_daily_hours,
			"considerPublicHolidays": self.consider_public_holidays,
			"companyHolidays": list(self.company_holidays),
		}


@dataclass
class Plan:
	id: str
	name: str
	members: list = field(default_factory=list)
	periods: list = field(default_factory=list)
	work_logs: list = field(default_factory=list)
	settings: Settings = field(default_factory=Settings)

	@classmethod
	def create(cls, name: str = constants.DEFAULT_PLAN_NAME) -> "Plan":
		return cls(id=new_id(), name=name)

	@classmethod
	def from_dict(cls, data: dict) -> "Plan":
		return cls(
			id=str(data["id"]),
			name=str(data.get("name", "")),
			members=[Member.from_dict(m) for m in data.get("members") or []],
			periods=[Period.from_dict(p) for p in data.get("periods") or []],
			work_logs=[WorkLog.from_dict(w) for w in data.get("workLogs") or []],
			settings=Settings.from_dict(data.get("settings")),
		)

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"name": self.name,
			"members": [m.to_dict() for m in self.members],
			"periods": [p.to_dict() for p in self.periods],
			"workLogs": [w.to_dict() for w in self.work_logs],
			"settings": self.settings.to_dict(),
		}

	def copy(self) -> "Plan":
		return copy.deepcopy(self)


@dataclass
class StagingPayload:
	"""A pending import waiting to be merged into a live plan."""
	periods: list = field(default_factory=list)
	members: list = field(default_factory=list)
	work_logs: list = field(default_factory=list)

	def is_empty(self) -> bool:
		return not (self.periods or self.members or self.work_logs)

	@classmethod
	def from_dict(cls, data) -> "StagingPayload":
		data = data or {}
		return cls(
			periods=[Period.from_dict(p) for p in data.get("periods") or []],
			members=[Member.from_dict(m) for m in data.get("members") or []],
			work_logs=[WorkLog.from_dict(w) for w in data.get("workLogs") or []],
		)

	def to_dict(self) -> dict:
		return {
			"periods": [p.to_dict() for p in self.periods],
			"members": [m.to_dict() for m in self.members],
			"workLogs": [w.to_dict() for w in self.work_logs],
		}
