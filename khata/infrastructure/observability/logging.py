"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from khata.config import settings


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

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_transaction_recorded(
    request_id: str,
    transaction_id: int,
    customer_id: str,
    type: str,
    amount_cents: int,
    balance_cents: int,
) -> None:
    """Log a committed ledger write with the customer's resulting balance"""
    logging.info(
        "Transaction recorded",
        extra={
            "request_id": request_id,
            "transaction_id": transaction_id,
            "customer_id": customer_id,
            "step": "transaction_recorded",
            "transaction_type": type,
            "amount_cents": amount_cents,
            "balance_cents": balance_cents,
        },
    )


def log_statement_generated(
    request_id: str,
    customer_id: str,
    entry_count: int,
    closing_balance_cents: int,
    duration_ms: float,
) -> None:
    logging.info(
        "Statement generated",
        extra={
            "request_id": request_id,
            "customer_id": customer_id,
            "step": "statement_generated",
            "entry_count": entry_count,
            "closing_balance_cents": closing_balance_cents,
            "duration_ms": duration_ms,
        },
    )
