"""
Logging setup for the OTP gate.

The gate and the API error handlers attach context to their records through
`extra=` (see OTP_CONTEXT_FIELDS). In production every record is one JSON
object carrying those fields; in development they are appended to a plain
text line.
"""

import logging
import sys
from typing import Any, Dict
from datetime import datetime, timezone
from pythonjsonlogger import jsonlogger

# Fields passed via extra= by otp_gate.core.otp and the handlers in main.py
OTP_CONTEXT_FIELDS = ("event", "email", "error_code", "status_code", "path")


class OtpJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter stamping the service name and OTP context on every record.
    """

    def __init__(self, *args: Any, service_name: str = "otp-gate", **kwargs: Any):
        self.service_name = service_name
        super().__init__(*args, **kwargs)

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['service'] = self.service_name
        # Records without an explicit event are grouped under the logger name
        log_record.setdefault('event', record.name.rsplit('.', 1)[-1])

        if record.levelno >= logging.WARNING:
            log_record['line'] = record.lineno


class OtpConsoleFormatter(logging.Formatter):
    """Plain text formatter that appends OTP context as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(
            f"{field}={getattr(record, field)}"
            for field in OTP_CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        )
        return f"{line} [{context}]" if context else line


def setup_logging(log_level: str = "INFO", json_logs: bool = True, service_name: str = "otp-gate") -> None:
    """
    Configure root logging for the API process.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: JSON output (production) or plain text (development)
        service_name: Value of the "service" field in JSON records
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)

    if json_logs:
        formatter = OtpJsonFormatter(
            '%(timestamp)s %(level)s %(logger)s %(message)s',
            service_name=service_name
        )
    else:
        formatter = OtpConsoleFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler.setFormatter(formatter)

    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.addHandler(console_handler)

    # SES and redis clients log every request at DEBUG/INFO
    for noisy in ("urllib3", "boto3", "botocore", "redis"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
