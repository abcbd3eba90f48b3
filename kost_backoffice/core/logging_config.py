from loguru import logger
import os

from kost_backoffice.core.config import LOG_DIR

# log_type values bound by the services and routes
BOOKING_CHANNEL = "booking"    # status transitions, edits, deletes, blocked approvals
DOCUMENT_CHANNEL = "document"  # generated / uploaded documents and pipeline failures
ADMIN_CHANNEL = "admin"        # which admin hit which endpoint

LOG_FORMAT = "{time} | {level} | {message}"

if not os.path.exists(LOG_DIR):
    os.makedirs(LOG_DIR)

logger.remove()


def channel_filter(log_type: str):
    """Loguru filter accepting only records bound with `log_type`."""
    return lambda record: record["extra"].get("log_type") == log_type


# Everything, including request/response lines from the middleware
logger.add(
    f"{LOG_DIR}/app.log",
    rotation="1 week",
    retention="4 weeks",
    level="INFO",
    enqueue=True,
    format=LOG_FORMAT
)

# Booking audit trail: one line per status change or edit, with old -> new status
logger.add(
    f"{LOG_DIR}/bookings.log",
    rotation="1 week",
    retention="12 weeks",
    level="INFO",
    enqueue=True,
    filter=channel_filter(BOOKING_CHANNEL),
    format=LOG_FORMAT
)

# Document numbers issued, Cloudinary uploads, per-document failures of generate-all
logger.add(
    f"{LOG_DIR}/documents.log",
    rotation="1 week",
    retention="12 weeks",
    level="INFO",
    enqueue=True,
    filter=channel_filter(DOCUMENT_CHANNEL),
    format=LOG_FORMAT
)

# Back-office admin actions, keyed by the JWT subject
logger.add(
    f"{LOG_DIR}/admin.log",
    rotation="1 week",
    retention="4 weeks",
    level="INFO",
    enqueue=True,
    filter=channel_filter(ADMIN_CHANNEL),
    format=LOG_FORMAT
)

# Errors with tracebacks (unexpected pipeline failures, Cloudinary errors)
logger.add(
    f"{LOG_DIR}/errors.log",
    rotation="1 week",
    retention="8 weeks",
    level="ERROR",
    enqueue=True,
    backtrace=True,
)

def get_logger():
    return logger
