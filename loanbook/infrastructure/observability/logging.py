"""Structured JSON logging for batch runs and the allocation API"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from loanbook.domain.models import AllocationResult, AssignmentOutcome


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service: str = "loanbook", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service


def setup_logging(level: str = "INFO", service: str = "loanbook") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stderr, stdout stays free for CLI output
    handler = logging.StreamHandler(sys.stderr)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service=service,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_unassigned(outcome: AssignmentOutcome, run_id: str) -> None:
    """Log a loan that no facility accepted"""
    logging.info(
        "Loan unassigned",
        extra={
            "run_id": run_id,
            "step": "loan_unassigned",
            "loan_id": outcome.loan_id,
            "reason": outcome.reason.value if outcome.reason else None,
        },
    )


def log_run_summary(run_id: str, result: AllocationResult, duration_ms: float) -> None:
    """Log structured run outcome for analysis"""
    logging.info(
        "Allocation run completed",
        extra={
            "run_id": run_id,
            "step": "run_complete",
            "assigned": len(result.assignments),
            "unassigned": len(result.unassigned),
            "facilities_used": len(result.yields),
            "total_expected_yield": sum(y.expected_yield for y in result.yields),
            "duration_ms": duration_ms,
        },
    )

    negative = result.negative_yield_facilities
    if negative:
        logging.warning(
            "Facilities with negative expected yield",
            extra={"run_id": run_id, "step": "negative_yield", "facility_ids": negative},
        )
