import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FILE = "lexterm.log"


def setup_logging(log_dir, debug=False):
    """Send ``lexterm`` logs to a rotating file.

    The TUI owns the terminal, so nothing is written to stderr unless the
    caller adds its own handler.
    """
    logger = logging.getLogger("lexterm")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, LOG_FILE)

    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == os.path.abspath(log_path):
            return logger

    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    )
    logger.addHandler(file_handler)
    return logger
