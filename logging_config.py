import logging
import sys

ROOT_LOGGER = "expocalc"


def setup_logging(level=logging.INFO):
    """
    Sets up logging for the calculator.
    Logs to stdout; calling it again updates the level of the logger and its handlers.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    # Prevent duplicate handlers on Streamlit reruns
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def get_logger(name=None):
    """
    Helper to get a sub-logger for a specific module.
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")
    return logging.getLogger(ROOT_LOGGER)
