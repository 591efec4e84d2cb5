import logging
import sys


class ContextFormatter(logging.Formatter):
    """Formatter that fills in request_id and stage when a record lacks them."""
    def format(self, record):
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        if not hasattr(record, "stage"):
            record.stage = "-"
        return super().format(record)


def configure_logging(level=logging.INFO) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(
        "%(asctime)s %(levelname)s %(name)s [request_id=%(request_id)s stage=%(stage)s] - %(message)s"
    ))
    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )
