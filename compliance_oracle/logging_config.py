"""
Logging configuration for the Compliance Oracle engine.

Provides structured JSON logging and a dedicated event logger that records
every state transition and every rejected operation.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import List, Optional

# Context variable for request ID tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    One JSON object per line, suitable for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class ComplianceEventLogger:
    """
    Logger for compliance state transitions.

    Each method emits one record whose ``extra_fields`` carry the
    event type and the identifiers involved.
    """

    def __init__(self, name: str = "compliance_oracle.events"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra = {
            "event_type": event_type,
            "request_id": request_id_var.get(),
            **kwargs
        }

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {kwargs.get('message', '')}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def oracle_added(self, oracle: str, reputation: int, height: int) -> None:
        self._log(
            logging.INFO,
            "ORACLE_ADDED",
            oracle=oracle,
            reputation=reputation,
            height=height,
            message=f"Oracle {oracle} authorized"
        )

    def oracle_deactivated(self, oracle: str, height: int) -> None:
        self._log(
            logging.INFO,
            "ORACLE_DEACTIVATED",
            oracle=oracle,
            height=height,
            message=f"Oracle {oracle} deactivated"
        )

    def reputation_adjusted(self, oracle: str, previous: int, current: int) -> None:
        self._log(
            logging.INFO,
            "REPUTATION_ADJUSTED",
            oracle=oracle,
            previous=previous,
            current=current,
            message=f"Reputation of {oracle}: {previous} -> {current}"
        )

    def entity_registered(self, entity: str, name: str, height: int) -> None:
        self._log(
            logging.INFO,
            "ENTITY_REGISTERED",
            entity=entity,
            name=name,
            height=height,
            message=f"Entity {entity} registered"
        )

    def report_submitted(
        self,
        entity: str,
        report_id: int,
        oracle: str,
        score: int,
        status: str,
        risk_category: str
    ) -> None:
        level = logging.WARNING if status == "CRITICAL" else logging.INFO
        self._log(
            level,
            "REPORT_SUBMITTED",
            entity=entity,
            report_id=report_id,
            oracle=oracle,
            score=score,
            status=status,
            risk_category=risk_category,
            message=f"Report {report_id} for {entity}: {status}"
        )

    def report_validated(self, entity: str, report_id: int, valid: bool) -> None:
        self._log(
            logging.INFO,
            "REPORT_VALIDATED",
            entity=entity,
            report_id=report_id,
            valid=valid,
            message=f"Report {report_id} marked {'valid' if valid else 'invalid'}"
        )

    def audit_recorded(
        self,
        entity: str,
        audit_id: int,
        auditor: str,
        follow_up_required: bool
    ) -> None:
        self._log(
            logging.INFO,
            "AUDIT_RECORDED",
            entity=entity,
            audit_id=audit_id,
            auditor=auditor,
            follow_up_required=follow_up_required,
            message=f"Audit {audit_id} recorded for {entity}"
        )

    def escalation_created(
        self,
        entity: str,
        escalation_id: int,
        violation_type: str,
        severity: int
    ) -> None:
        self._log(
            logging.WARNING,
            "ESCALATION_CREATED",
            entity=entity,
            escalation_id=escalation_id,
            violation_type=violation_type,
            severity=severity,
            message=f"Escalation {escalation_id} opened for {entity}"
        )

    def paused(self, paused: bool, caller: str) -> None:
        self._log(
            logging.WARNING if paused else logging.INFO,
            "SYSTEM_PAUSED" if paused else "SYSTEM_UNPAUSED",
            caller=caller,
            message="Mutating entity paths paused" if paused else "Mutating entity paths resumed"
        )

    def intelligence_compiled(
        self,
        caller: str,
        entities: List[str],
        confidence: int,
        signed: bool
    ) -> None:
        self._log(
            logging.INFO,
            "INTELLIGENCE_REPORT_COMPILED",
            caller=caller,
            entity_count=len(entities),
            confidence=confidence,
            signed=signed,
            message=f"Intelligence report over {len(entities)} entities"
        )

    def operation_rejected(
        self,
        operation: str,
        caller: Optional[str],
        code: str,
        detail: str = ""
    ) -> None:
        self._log(
            logging.WARNING,
            "OPERATION_REJECTED",
            operation=operation,
            caller=caller,
            code=code,
            detail=detail,
            message=f"{operation} rejected: {code}"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting (recommended for production)
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set the request ID for the current context, generating one if needed."""
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> str:
    return request_id_var.get()


# Global event logger instance
event_log = ComplianceEventLogger()
