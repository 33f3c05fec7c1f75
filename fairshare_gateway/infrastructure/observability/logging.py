"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from fairshare_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_report(
    request_id: str,
    user_id: str,
    period: str,
    transaction_count: int,
    duration_ms: float,
) -> None:
    """Log structured report outcome for analysis"""
    logging.info(
        "Report completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "report_complete",
            "period": period,
            "transaction_count": transaction_count,
            "duration_ms": duration_ms,
        },
    )


def log_notification(event: str, outcome: str, reason: str, **fields: Any) -> None:
    """Log a notification handler outcome; failures are logged, never raised"""
    level = logging.ERROR if outcome == "failed" else logging.INFO
    logging.log(
        level,
        f"Notification {outcome}: {reason}",
        extra={"step": "notification", "event": event, "outcome": outcome, **fields},
    )
