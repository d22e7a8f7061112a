import logging

from vision_metadata.utils.request_context import get_request_id


class RequestIdFilter(logging.Filter):
    """Stamps every record with the current request id (or "-")."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True
