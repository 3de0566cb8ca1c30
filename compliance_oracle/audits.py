"""
Audit Log

Independent audit findings, kept apart from oracle attestations. Audits
never change entity state.
"""

from typing import Optional, Sequence

from .bounds import validate_findings
from .config import FOLLOW_UP_FINDINGS_THRESHOLD, MAX_FINDINGS
from .entities import EntityRegistry
from .errors import InvalidDataError, NotFoundError
from .logging_config import ComplianceEventLogger, event_log
from .records import NEXT_AUDIT_ID, Audit
from .store import StateStore


def follow_up_required(findings: Sequence[int]) -> bool:
    return sum(findings) > FOLLOW_UP_FINDINGS_THRESHOLD


class AuditLog:

    def __init__(
        self,
        store: StateStore,
        entities: EntityRegistry,
        events: ComplianceEventLogger = event_log
    ):
        self.store = store
        self.entities = entities
        self.events = events

    def record(
        self,
        auditor: str,
        entity_id: str,
        audit_type: str,
        findings: Sequence[int],
        recommendations: str,
        now: int
    ) -> int:
        """Persist an immutable audit row and return its id."""
        with self.store.transaction():
            if not self.entities.exists(entity_id):
                raise NotFoundError(f"entity {entity_id} not registered")
            if not isinstance(audit_type, str):
                raise InvalidDataError("audit type must be a string")
            values = validate_findings(findings, MAX_FINDINGS)

            audit = Audit(
                entity=entity_id,
                audit_id=self.store.allocate(NEXT_AUDIT_ID),
                auditor=auditor,
                audit_type=audit_type,
                findings=values,
                recommendations=recommendations or "",
                follow_up_required=follow_up_required(values),
                timestamp=now,
            )
            self.store.put_audit(audit)

        self.events.audit_recorded(entity_id, audit.audit_id, auditor, audit.follow_up_required)
        return audit.audit_id

    def get(self, entity_id: str, audit_id: int) -> Optional[Audit]:
        return self.store.get_audit(entity_id, audit_id)
