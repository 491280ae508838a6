"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from budget_nikal.config import settings


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


def log_cash_out(
    user_id: str,
    budget_id: str,
    action: str,
    amount: Decimal,
    rows: int,
    balance_used: Decimal,
) -> None:
    """Log a cash-out plan being applied or reset"""
    logging.info(
        f"Cash-out plan {action}",
        extra={
            "user_id": user_id,
            "budget_id": budget_id,
            "step": f"cash_out_{action}",
            "amount": str(amount),
            "rows": rows,
            "balance_used": str(balance_used),
        },
    )


def log_month_created(user_id: str, budget_id: str, year: int, month: int) -> None:
    """Log creation of a month through next-month rollover"""
    logging.info(
        "Next month created",
        extra={
            "user_id": user_id,
            "budget_id": budget_id,
            "step": "month_created",
            "year": year,
            "month": month,
        },
    )
