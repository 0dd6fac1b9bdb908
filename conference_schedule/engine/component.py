import logging
import sys


def init_logging(level=logging.INFO, name="ScheduleEngine"):
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter("[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s", "%d.%m.%Y %H:%M:%S %z"))
    logger.addHandler(handler)


class Component:
    """
    Base class for the engine parts. Each part logs under its own name.
    """
    def __init__(self, name):
        init_logging(name=name)
        self.name = name

    def log(self, msg):
        logging.getLogger(self.name).info(msg)

    def warn(self, msg):
        logging.getLogger(self.name).warning(msg)
