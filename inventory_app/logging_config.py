import logging

from inventory_app.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = None):
    """Configure the root logger once for the whole process."""
    logging.basicConfig(level=level or settings.log_level, format=LOG_FORMAT)

    # SQL echo is controlled by LOG_SQL_QUERIES, keep the engine logger quiet otherwise
    if not settings.log_sql_queries:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
