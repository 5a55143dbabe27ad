import logging

from agrimart.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = None):
    """Configure le logging racine une seule fois au démarrage"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # Motor/pymongo sont très bavards en DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)
