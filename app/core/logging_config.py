import logging
from logging import INFO

from app.core.config import LOG_LEVEL

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Applies the shared log format to the root logger."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Tortoise is chatty at DEBUG (every SQL statement)
    logging.getLogger('tortoise').setLevel(INFO)
    logging.getLogger('aiokafka').setLevel(logging.WARNING)
