"""Integration tests for logging_config.

- Handler setup for file, console and size rotation
- Package logger routing
- Old log pruning and test log cleanup
"""

import logging
import os
import time
import pytest
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from unittest.mock import patch
from workload_planner import logging_config
from workload_planner.logging_config import cleanup_old_logs, cleanup_test_logs, ensure_log_directory, get_logger


@pytest.fixture
def fresh_logger_names():
	"""Loggers created by a test get their handlers removed afterwards."""
	names = []
	yield names
	for name in names:
		logger = logging.getLogger(name)
		for handler in logger.handlers[:]:
			handler.close()
			logger.removeHandler(handler)


def _console_handlers(logger):
	return [h for h in logger.handlers if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)]


@pytest.mark.integration
def test_get_logger_creates_daily_file_handler(fresh_logger_names):
	fresh_logger_names.append("test_daily")
	logger = get_logger("test_daily", "test_subdir", include_package=False)

	file_handlers = [h for h in logger.handlers if isinstance(h, TimedRotatingFileHandler)]
	assert len(file_handlers) == 1
	assert os.path.basename(file_handlers[0].baseFilename).startswith("test_subdir_")


@pytest.mark.integration
def test_get_logger_console_flag(fresh_logger_names):
	fresh_logger_names.extend(["test_console", "test_no_console"])
	assert len(_console_handlers(get_logger("test_console", "test_subdir", include_package=False))) == 1
	assert _console_handlers(get_logger("test_no_console", "test_subdir", console_output=False, include_package=False)) == []


@pytest.mark.integration
def test_get_logger_custom_level(fresh_logger_names):
	fresh_logger_names.append("test_debug")
	logger = get_logger("test_debug", "test_subdir", level="debug", include_package=False)
	assert all(h.level == logging.DEBUG for h in logger.handlers)


@pytest.mark.integration
def test_get_logger_size_rotation(fresh_logger_names):
	fresh_logger_names.append("test_size")
	logger = get_logger("test_size", "test_subdir", use_size_rotation=True, console_output=False, include_package=False)
	size_handlers = [h for h in logger.handlers if type(h) is RotatingFileHandler]
	assert len(size_handlers) == 1
	assert size_handlers[0].maxBytes == logging_config.MAX_LOG_SIZE_MB * 1024 * 1024


@pytest.mark.integration
def test_get_logger_is_configured_once(fresh_logger_names):
	fresh_logger_names.append("test_once")
	first = get_logger("test_once", "test_subdir", include_package=False)
	count = len(first.handlers)
	second = get_logger("test_once", "test_subdir", include_package=False)
	assert second is first
	assert len(second.handlers) == count


@pytest.mark.integration
def test_package_messages_reach_entry_point_log(fresh_logger_names, tmp_path):
	fresh_logger_names.append("test_entry")
	package_logger = logging.getLogger(logging_config.PACKAGE_LOGGER)
	saved = package_logger.handlers[:]
	for handler in saved:
		package_logger.removeHandler(handler)

	try:
		with patch.object(logging_config, "LOG_BASE_DIR", tmp_path):
			get_logger("test_entry", "entry", console_output=False)
			logging.getLogger("workload_planner.importer").info("routed message")

		for handler in package_logger.handlers:
			handler.flush()
		log_files = list((tmp_path / "entry").glob("entry_*.log"))
		assert len(log_files) == 1
		assert "routed message" in log_files[0].read_text(encoding="utf-8")
	finally:
		for handler in package_logger.handlers[:]:
			package_logger.removeHandler(handler)
			handler.close()
		for handler in saved:
			package_logger.addHandler(handler)


@pytest.mark.integration
def test_ensure_log_directory(tmp_path):
	with patch.object(logging_config, "LOG_BASE_DIR", tmp_path):
		first = ensure_log_directory("cli")
		second = ensure_log_directory("cli")
	assert first == second == tmp_path / "cli"
	assert first.is_dir()


@pytest.mark.integration
def test_cleanup_old_logs_removes_only_expired(tmp_path):
	old_log = tmp_path / "old.log"
	new_log = tmp_path / "new.log"
	other = tmp_path / "notes.txt"
	for path in (old_log, new_log, other):
		path.write_text("x", encoding="utf-8")
	expired = time.time() - 40 * 24 * 3600
	os.utime(old_log, (expired, expired))
	os.utime(other, (expired, expired))

	cleanup_old_logs(tmp_path, retention_days=30)

	assert not old_log.exists()
	assert new_log.exists()
	assert other.exists()


@pytest.mark.integration
def test_cleanup_old_logs_missing_directory(tmp_path):
	cleanup_old_logs(tmp_path / "missing")


@pytest.mark.integration
def test_cleanup_test_logs_removes_test_directory(tmp_path):
	test_dir = tmp_path / "test_logs"
	(test_dir / "cli").mkdir(parents=True)
	with patch.object(logging_config, "TEST_LOG_DIR", test_dir):
		cleanup_test_logs()
	assert not test_dir.exists()


@pytest.mark.integration
def test_cleanup_test_logs_outside_tests_is_a_no_op(tmp_path):
	test_dir = tmp_path / "test_logs"
	test_dir.mkdir()
	with patch.object(logging_config, "TEST_LOG_DIR", test_dir), patch.object(logging_config, "IS_TEST_ENV", False):
		cleanup_test_logs()
	assert test_dir.exists()
