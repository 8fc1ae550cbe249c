import logging
import sys


def setup_logging(level=logging.INFO, format_string='%(asctime)s - %(name)s - %(levelname)s - %(message)s'):
    """Configures the package logger to write to stdout."""
    pkg_logger = logging.getLogger("stiffnls")
    pkg_logger.setLevel(level)
    if not pkg_logger.handlers:
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(logging.Formatter(format_string))
        pkg_logger.addHandler(handler)
    return pkg_logger


# Setup logging when this module is imported
setup_logging()

# Create a logger instance for other modules to import
logger = logging.getLogger("stiffnls")
