import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from page_bridge.config import CONFIG

LOG_LEVELS = {
	'debug': logging.DEBUG,
	'info': logging.INFO,
	'warning': logging.WARNING,
	'error': logging.ERROR,
}


def log_level(name: str) -> int:
	"""Map a PAGE_BRIDGE_LOGGING_LEVEL value to a logging level, falling back to INFO."""
	return LOG_LEVELS.get(name.lower(), logging.INFO)


def setup_logging():
	if logging.getLogger().hasHandlers():
		return logging.getLogger('page_bridge')

	level = log_level(CONFIG.PAGE_BRIDGE_LOGGING_LEVEL)

	console = logging.StreamHandler(sys.stdout)
	console.setFormatter(logging.Formatter('%(levelname)-8s [%(name)s] %(message)s'))

	root = logging.getLogger()
	root.handlers = []
	root.addHandler(console)
	root.setLevel(level)

	page_bridge_logger = logging.getLogger('page_bridge')
	page_bridge_logger.propagate = False
	page_bridge_logger.addHandler(console)
	page_bridge_logger.setLevel(level)

	# playwright's driver and asyncio are chatty at INFO
	for logger_name in ('playwright', 'asyncio', 'websockets', 'urllib3'):
		third_party = logging.getLogger(logger_name)
		third_party.setLevel(logging.ERROR)
		third_party.propagate = False

	return page_bridge_logger
