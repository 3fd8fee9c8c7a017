import logging

LOGGER_NAME = "tsid"


def set_level(level):
    """Sets the level of the "tsid" logger, and so of every tsid.* child."""
    tsid_logger = logging.getLogger(LOGGER_NAME)
    tsid_logger.setLevel(level.upper() if isinstance(level, str) else level)
    return tsid_logger


def setup_logger(name: str = LOGGER_NAME, level=None):
    """Configures root logging for the service entry point.

    Library modules use logging.getLogger() and never call this.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler()],
    )

    if level is not None:
        set_level(level)

    return logging.getLogger(name)
