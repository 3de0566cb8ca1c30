"""
Escalation Manager

Materializes remediation work items. Escalations are opened by report
ingestion on every CRITICAL result and stay PENDING; assignment and
resolution have no operations yet.
"""

from typing import List, Optional

from .logging_config import ComplianceEventLogger, event_log
from .records import NEXT_ESCALATION_ID, Escalation, EscalationStatus
from .store import StateStore


class EscalationManager:

    def __init__(self, store: StateStore, events: ComplianceEventLogger = event_log):
        self.store = store
        self.events = events

    def open(self, entity: str, violation_type: str, severity: int, now: int) -> Escalation:
        with self.store.transaction():
            escalation = Escalation(
                entity=entity,
                escalation_id=self.store.allocate(NEXT_ESCALATION_ID),
                violation_type=violation_type,
                severity=severity,
                created_at=now,
                status=EscalationStatus.PENDING,
                assigned_to=None,
                resolution_notes=None,
            )
            self.store.put_escalation(escalation)

        self.events.escalation_created(
            entity, escalation.escalation_id, violation_type, severity
        )
        return escalation

    def get(self, entity: str, escalation_id: int) -> Optional[Escalation]:
        return self.store.get_escalation(entity, escalation_id)

    def for_entity(self, entity: str) -> List[Escalation]:
        return self.store.list_escalations(entity)
