# utils/logger.py
import logging
import os
import sys
from config.paths import LOG_PATH

# Module loggers are named after their package; each top-level package gets the handlers
PACKAGE_LOGGERS = ("planning", "repository", "utils", "api")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOG_PATH.parent.mkdir(parents=True, exist_ok=True)

file_handler = logging.FileHandler(LOG_PATH, encoding="utf-8")
file_handler.setFormatter(
    logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
)

# stdout -> docker logs
stream_handler = logging.StreamHandler(sys.stdout)
stream_handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))

for name in PACKAGE_LOGGERS:
    package_logger = logging.getLogger(name)
    package_logger.setLevel(LOG_LEVEL)
    # importing twice must not double every line
    if not package_logger.handlers:
        package_logger.addHandler(file_handler)
        package_logger.addHandler(stream_handler)

logger = logging.getLogger("planning")
