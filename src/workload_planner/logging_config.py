"""
Centralized logging configuration for the workload planner.

- Logs live under ./logs/<subdir> (or a temp directory while pytest runs)
- Daily rotation with date-stamped file names, optional size-based rotation
- Old logs are pruned after LOG_RETENTION_DAYS (default 30)
- One format for every module

Library modules log through logging.getLogger(__name__); entry points (CLI,
web app) attach handlers here:

    from workload_planner.logging_config import get_logger

    logger = get_logger('cli', 'cli')
    logger.info('Staged 4 periods for plan "Q3"')
"""

import logging
import os
import shutil
import sys
import tempfile
from datetime import datetime, timedelta
from logging.handlers import TimedRotatingFileHandler, RotatingFileHandler
from pathlib import Path
from typing import Optional


IS_TEST_ENV = 'pytest' in sys.modules

TEST_LOG_DIR = Path(tempfile.gettempdir()) / 'workload_planner_test_logs'
LOG_BASE_DIR = TEST_LOG_DIR if IS_TEST_ENV else Path(os.getenv('LOG_DIR', 'logs'))
DEFAULT_LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_RETENTION_DAYS = int(os.getenv('LOG_RETENTION_DAYS', '30'))
MAX_LOG_SIZE_MB = int(os.getenv('MAX_LOG_SIZE_MB', '10'))

# Package loggers are children of this one, so entry points can route them
PACKAGE_LOGGER = 'workload_planner'

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def ensure_log_directory(log_subdir: str) -> Path:
	"""Create <LOG_BASE_DIR>/<log_subdir> if needed and return it."""
	log_dir = LOG_BASE_DIR / log_subdir
	log_dir.mkdir(parents=True, exist_ok=True)
	return log_dir


def cleanup_old_logs(log_dir: Path, retention_days: int = LOG_RETENTION_DAYS):
	"""Remove *.log files in log_dir last modified before the retention window."""
	if not log_dir.exists():
		return

	cutoff = (datetime.now() - timedelta(days=retention_days)).timestamp()
	for log_file in log_dir.glob('*.log'):
		if log_file.stat().st_mtime < cutoff:
			try:
				log_file.unlink()
			except OSError:
				pass  # file may be held open by another process


def _resolve_level(level: Optional[str]) -> int:
	return getattr(logging, (level or DEFAULT_LOG_LEVEL).upper())


def _daily_file_handler(log_dir: Path, log_subdir: str, log_level: int, formatter: logging.Formatter):
	handler = TimedRotatingFileHandler(
		filename=log_dir / f"{log_subdir}_{datetime.now().strftime('%Y-%m-%d')}.log",
		when='midnight',
		interval=1,
		backupCount=LOG_RETENTION_DAYS,
		encoding='utf-8'
	)
	handler.setLevel(log_level)
	handler.setFormatter(formatter)
	return handler


def get_logger(
	name: str,
	log_subdir: str,
	level: Optional[str] = None,
	use_size_rotation: bool = False,
	console_output: bool = True,
	include_package: bool = True
) -> logging.Logger:
	"""
	Get a configured logger instance.

	Args:
		name: Logger name (e.g., 'cli', 'webapp')
		log_subdir: Subdirectory under the log root (e.g., 'cli', 'api')
		level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Defaults to LOG_LEVEL
		use_size_rotation: Also write a size-rotated rolling log
		console_output: Also log to stderr
		include_package: Attach the same handlers to the package logger so that
			messages from workload_planner.* modules land in this log too

	Returns:
		Configured logger instance
	"""
	logger = logging.getLogger(name)

	if logger.handlers:
		return logger

	logger.setLevel(logging.DEBUG)  # handlers filter
	log_level = _resolve_level(level)

	log_dir = ensure_log_directory(log_subdir)
	cleanup_old_logs(log_dir)

	formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
	handlers = [_daily_file_handler(log_dir, log_subdir, log_level, formatter)]

	if use_size_rotation:
		size_handler = RotatingFileHandler(
			filename=log_dir / f"{log_subdir}_rolling.log",
			maxBytes=MAX_LOG_SIZE_MB * 1024 * 1024,
			backupCount=5,
			encoding='utf-8'
		)
		size_handler.setLevel(log_level)
		size_handler.setFormatter(formatter)
		handlers.append(size_handler)

	if console_output:
		console_handler = logging.StreamHandler()
		console_handler.setLevel(log_level)
		console_handler.setFormatter(formatter)
		handlers.append(console_handler)

	for handler in handlers:
		logger.addHandler(handler)

	if include_package and name != PACKAGE_LOGGER:
		package_logger = logging.getLogger(PACKAGE_LOGGER)
		if not package_logger.handlers:
			package_logger.setLevel(logging.DEBUG)
			for handler in handlers:
				package_logger.addHandler(handler)

	return logger


def cleanup_test_logs():
	"""
	Remove the temporary log directory created during a pytest run.
	No effect outside the test environment.
	"""
	if not IS_TEST_ENV:
		return

	if TEST_LOG_DIR.exists():
		shutil.rmtree(TEST_LOG_DIR, ignore_errors=True)
