"""
Report Ingestion & Scoring Engine

Validates and scores oracle attestations, then rewrites the target
entity's derived state. One submission:

1. Scores the metrics and derives status and risk category
2. Persists the report (``validated`` starts False)
3. Updates the entity and schedules its next audit
4. Opens an escalation when the result is CRITICAL
5. Counts a violation when the result is NON_COMPLIANT or CRITICAL
6. Credits the submitting oracle's reputation

Caller capability checks happen in the engine before these methods run.
"""

from typing import Sequence

from .bounds import validate_digest, validate_metrics
from .config import (
    AUDIT_INTERVAL,
    CRITICAL_FAILURE_SEVERITY,
    CRITICAL_FAILURE_TYPE,
    MAX_METRICS,
)
from .entities import EntityRegistry
from .errors import InvalidDataError, NotFoundError
from .escalations import EscalationManager
from .logging_config import ComplianceEventLogger, event_log
from .oracles import OracleRegistry
from .records import NEXT_REPORT_ID, ComplianceStatus, Report
from .scoring import compliance_score, counts_as_violation, derive_risk_category, derive_status
from .store import StateStore


class ReportIngestion:

    def __init__(
        self,
        store: StateStore,
        oracles: OracleRegistry,
        entities: EntityRegistry,
        escalations: EscalationManager,
        events: ComplianceEventLogger = event_log
    ):
        self.store = store
        self.oracles = oracles
        self.entities = entities
        self.escalations = escalations
        self.events = events

    def submit(
        self,
        oracle: str,
        entity_id: str,
        evidence_digest: bytes,
        metrics: Sequence[int],
        notes: str,
        severity: str,
        now: int
    ) -> int:
        """Ingest one attestation and return its report id."""
        with self.store.transaction():
            entity = self.entities.get(entity_id)
            if entity is None:
                raise NotFoundError(f"entity {entity_id} not registered")
            values = validate_metrics(metrics, MAX_METRICS)
            digest = validate_digest(evidence_digest)

            score = compliance_score(values)
            status = derive_status(score)
            # Risk uses the violation count from before this report.
            risk = derive_risk_category(score, entity.violations)

            report_id = self.store.allocate(NEXT_REPORT_ID)
            self.store.put_report(Report(
                entity=entity_id,
                report_id=report_id,
                oracle=oracle,
                timestamp=now,
                evidence_digest=digest,
                metrics=values,
                notes=notes or "",
                severity=severity or "",
                validated=False,
            ))

            entity.compliance_score = score
            entity.status = status
            entity.risk_category = risk
            entity.last_updated = now
            entity.next_audit_due = now + AUDIT_INTERVAL

            if status == ComplianceStatus.CRITICAL:
                self.escalations.open(
                    entity_id, CRITICAL_FAILURE_TYPE, CRITICAL_FAILURE_SEVERITY, now
                )

            if counts_as_violation(status):
                entity.violations += 1

            self.store.put_entity(entity)
            self.oracles.record_attestation(oracle, now)

        self.events.report_submitted(
            entity_id, report_id, oracle, score, status.value, risk.value
        )
        return report_id

    def validate(self, entity_id: str, report_id: int, valid: bool) -> Report:
        """
        Mark a report valid or invalid and feed the verdict back into the
        submitting oracle's reputation. Repeated calls overwrite the flag.
        """
        with self.store.transaction():
            report = self.store.get_report(entity_id, report_id)
            if report is None:
                raise InvalidDataError(f"report {report_id} for {entity_id} does not exist")
            oracle = self.oracles.get(report.oracle)
            if oracle is None:
                raise InvalidDataError(f"report {report_id} names unknown oracle {report.oracle}")

            self.oracles.apply_reputation(oracle, positive=bool(valid))
            report.validated = bool(valid)
            self.store.put_report(report)

        self.events.report_validated(entity_id, report_id, bool(valid))
        return report
