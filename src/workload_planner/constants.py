import os

DATE_FORMAT = "%Y-%m-%d"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

# JSON document holding plans and staged imports - can be overridden by environment
DEFAULT_DB_PATH = os.getenv("WORKLOAD_DB_PATH", "data/db.json")

# Public holiday source (date -> holiday name)
HOLIDAY_API_URL = os.getenv("HOLIDAY_API_URL", "https://holidays-jp.github.io/api/v1/date.json")
HOLIDAY_TIMEOUT_SECONDS = int(os.getenv("HOLIDAY_TIMEOUT_SECONDS", "10"))

DEFAULT_PLAN_NAME = "Default Plan"

# Task name given to hand-entered leave logs
LEAVE_TASK_NAME = "Time Off"

MEMBER_DEFAULTS = {
	"buffer": 5,
	"projectRatio": 50,
	"featureRatio": 50,
}

SETTINGS_DEFAULTS = {
	"defaultDailyHours": 7.5,
	"considerPublicHolidays": True,
	"companyHolidays": [],
}

# Work type labels accepted in workload CSVs, matched after lower()/strip()
PROJECT_LABELS = {"project", "プロジェクト"}
FEATURE_LABELS = {"feature", "フィーチャー", "機能"}

PERIOD_CSV_FIELDS = ["name", "startDate", "endDate"]
WORKLOAD_CSV_FIELDS = ["workType", "projectName", "taskName", "memberName"]

# Export header labels
SUMMARY_CATEGORY_HEADER = "category"
SUMMARY_MEMBER_HEADER = "memberName"
PROJECT_CATEGORY = "Project"
FEATURE_CATEGORY = "Feature"
LEAVE_CATEGORY = "Leave"
