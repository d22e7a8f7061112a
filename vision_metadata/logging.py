import logging

from vision_metadata.config import settings
from vision_metadata.utils.logging_filter import RequestIdFilter

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s request_id=%(request_id)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    resolved = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setLevel(resolved)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(resolved)
    root.handlers = [handler]
