"""Log filters for location masking and correlation ID injection."""

import logging
import re


class LocationMaskingFilter(logging.Filter):
    """Rounds high-precision coordinates in log messages to two decimals.

    Passenger pickup and dropoff points are personal data; two decimals
    (about 1 km) keep logs useful for debugging routes without pinpointing
    an address.
    """

    COORDINATE_PATTERN = re.compile(r"(?<![\w.])(-?\d{1,3})\.(\d{2})\d{2,}")

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str) and "." in record.msg:
            record.msg = self.COORDINATE_PATTERN.sub(r"\1.\2", record.msg)
        return True


class DefaultCorrelationFilter(logging.Filter):
    """Adds default correlation_id if not present."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True
