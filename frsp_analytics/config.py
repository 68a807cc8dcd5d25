# frsp_analytics/config.py

import os
import sys
import logging

# -----------------------------------------------------------------------------
# 1) CONFIGURATION: data locations
# -----------------------------------------------------------------------------

DATA_DIR = os.environ.get("FRSP_DATA_DIR", os.path.join("public", "data"))
STUDENTS_FILE = "students.json"
# older exports ship the roster under this name
STUDENTS_FALLBACK_FILE = "assessments.json"
ATTENDANCE_FILE = "attendance.json"

RESULTS_DIR = os.path.join("public", "views")
FIG_DIR = os.path.join("public", "images")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


# -----------------------------------------------------------------------------
# 2) LOGGER SETUP
# -----------------------------------------------------------------------------

def setup_logging(log_file=None, level=logging.INFO):
    """
    Configure the package logger:
      - console handler on stdout at `level`
      - optional file handler at DEBUG
    Safe to call more than once; existing handlers are replaced.
    """
    logger = logging.getLogger("frsp_analytics")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    # File handler
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(log_file)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger
