import datetime
import logging
import requests
from workload_planner import constants

logger = logging.getLogger(__name__)


def fetch_holidays(url: str = constants.HOLIDAY_API_URL, timeout: int = constants.HOLIDAY_TIMEOUT_SECONDS) -> dict:
	"""
	Fetch public holidays as {"YYYY-MM-DD": name}.

	Never raises: on any network or decoding failure the import carries on as if
	there were no holidays, so an empty dict is returned.
	"""
	try:
		resp = requests.get(url, timeout=timeout)
		resp.raise_for_status()
		data = resp.json()
	except (requests.RequestException, ValueError) as e:
		logger.warning(f"Failed to fetch holidays from {url}, continuing without holiday data: {e}")
		return {}

	if not isinstance(data, dict):
		logger.warning(f"Unexpected holiday payload from {url} ({type(data).__name__}), ignoring")
		return {}

	logger.debug(f"Fetched {len(data)} holidays from {url}")
	return {str(k): str(v) for k, v in data.items()}


def calculate_working_days(start_date: str, end_date: str, holidays: dict, settings) -> int:
	"""
	Count weekdays in [start_date, end_date], excluding public holidays (when the
	plan considers them) and the plan's company holidays.
	"""
	start = datetime.datetime.strptime(start_date, constants.DATE_FORMAT).date()
	end = datetime.datetime.strptime(end_date, constants.DATE_FORMAT).date()
	holidays = holidays or {}
	company_holidays = set(settings.company_holidays or [])

	count = 0
	current = start
	while current <= end:
		day = current.isoformat()
		is_weekend = current.weekday() >= 5
		is_public_holiday = settings.consider_public_holidays and day in holidays
		if not is_weekend and not is_public_holiday and day not in company_holidays:
			count += 1
		current += datetime.timedelta(days=1)

	return count
