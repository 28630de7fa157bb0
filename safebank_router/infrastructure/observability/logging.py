"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger.json import JsonFormatter

from safebank_router.config import settings
from safebank_router.domain.models import CoverageTotals, RoutingResult


class CustomJsonFormatter(JsonFormatter):
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


def log_coverage_report(
    request_id: str,
    cap: int,
    license_count: int,
    totals: CoverageTotals,
    duration_ms: float,
) -> None:
    """Log structured coverage outcome for analysis"""
    logging.info(
        "Coverage computed",
        extra={
            "request_id": request_id,
            "step": "coverage_complete",
            "cap": cap,
            "license_count": license_count,
            "eligible": totals.eligible,
            "protected": totals.protected,
            "excess": totals.excess,
            "non_protected": totals.non_protected,
            "duration_ms": duration_ms,
        },
    )


def log_routing_plan(request_id: str, cap: int, result: RoutingResult, duration_ms: float) -> None:
    """Log structured routing outcome for analysis"""
    logging.info(
        "Routing plan computed",
        extra={
            "request_id": request_id,
            "step": "routing_complete",
            "cap": cap,
            "idle_cash": result.idle_cash,
            "plan_entries": len(result.plan),
            "allocated": result.total_allocated,
            "projected_interest": result.projected_interest,
            "duration_ms": duration_ms,
        },
    )
