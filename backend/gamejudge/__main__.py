import logging
import sys

import uvicorn

from .main import configure_logging
from .settings import ConfigurationError, Settings

logger = logging.getLogger("gamejudge")


def main() -> int:
	cfg = Settings()
	configure_logging(cfg.log_level)
	try:
		cfg.require_api_key()
	except ConfigurationError as err:
		logger.error("%s", err)
		return 1
	uvicorn.run("gamejudge.main:app", host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())
	return 0


if __name__ == "__main__":
	sys.exit(main())
