"""
Entity Registry

Tracked subjects and their current derived compliance state. Entities are
created once and never deleted; only report ingestion mutates them.
"""

from typing import Optional

from .config import AUDIT_INTERVAL
from .errors import AlreadyExistsError, InvalidDataError
from .logging_config import ComplianceEventLogger, event_log
from .records import TOTAL_ENTITIES, ComplianceStatus, Entity, RiskCategory
from .store import StateStore


class EntityRegistry:

    def __init__(self, store: StateStore, events: ComplianceEventLogger = event_log):
        self.store = store
        self.events = events

    def get(self, identity: str) -> Optional[Entity]:
        return self.store.get_entity(identity)

    def exists(self, identity: str) -> bool:
        return self.store.get_entity(identity) is not None

    def register(self, identity: str, name: str, now: int) -> Entity:
        """Insert a PENDING entity with its first audit due one interval out."""
        if not identity:
            raise InvalidDataError("entity identity is required")
        if not isinstance(name, str):
            raise InvalidDataError("entity name must be a string")

        with self.store.transaction():
            if self.store.get_entity(identity) is not None:
                raise AlreadyExistsError(f"entity {identity} already registered")

            entity = Entity(
                identity=identity,
                name=name,
                compliance_score=0,
                last_updated=now,
                status=ComplianceStatus.PENDING,
                violations=0,
                risk_category=RiskCategory.UNKNOWN,
                next_audit_due=now + AUDIT_INTERVAL,
                escalation_level=0,
            )
            self.store.put_entity(entity)
            self.store.adjust_counter(TOTAL_ENTITIES, 1)

        self.events.entity_registered(identity, name, now)
        return entity
