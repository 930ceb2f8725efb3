import pytest
import requests
import workload_planner.holidays as holidays_mod
import workload_planner.webapp.api as apimod


@pytest.fixture(autouse=True)
def temp_db(monkeypatch, tmp_path):
	# Point the API at an isolated store for all tests under tests/webapp/
	db_path = tmp_path / "db.json"
	monkeypatch.setattr(apimod, "DB_PATH", db_path)
	return db_path


@pytest.fixture(autouse=True)
def offline_holidays(monkeypatch):
	def fake_get(url, timeout):
		raise requests.ConnectionError("offline")
	monkeypatch.setattr(holidays_mod.requests, "get", fake_get)
